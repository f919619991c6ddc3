"""
spid - CLI Interface.

A command-line interface for detecting file changes across runs and keeping
the detection history in a passphrase-encrypted database.

Usage Examples:
    # Create a database from a watch configuration
    spid init --config config.json --db spid.db

    # Run a scan and show new events plus the full history
    spid scan --db spid.db

    # Follow symlinks inside watched directories and keep a log file
    spid scan --db spid.db --follow-symlinks --log-file scan.log --verbose
"""

import logging
import os
import time
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from spid import __version__, sentinel
from spid.config import WatchConfig, verify_watch_paths
from spid.exceptions import ConfigError, SpidError
from spid.models import Event, SentinelState
from spid.orchestration import ScanLogger
from spid.ui import ScanReport

# Initialize Typer app
app = typer.Typer(
    name="spid",
    help="spid - simple portable intrusion detection.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"spid v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route spid's loggers through Rich, at DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def prompt_passphrase(label: str) -> str:
    """Read a passphrase without echoing it."""
    return typer.prompt(label, hide_input=True)


def write_scan_log(
    scan_logger: ScanLogger,
    events: List[Event],
    state: SentinelState,
    duration_seconds: float,
) -> None:
    """Write the scan log. The scan is already saved, so failures only warn."""
    try:
        with scan_logger:
            scan_logger.log_header()
            scan_logger.log_scan(events, state.scans[-1])
            scan_logger.log_history(state.scans)
            scan_logger.log_summary(state, duration_seconds)
    except OSError as e:
        console.print(f"[yellow]Warning:[/yellow] Cannot write log file: {e}")
        return
    console.print(f"[dim]Log written to: {scan_logger.get_log_path()}[/dim]")


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """spid - simple portable intrusion detection."""
    pass


@app.command()
def init(
    config_path: Path = typer.Option(
        Path("config.json"),
        "--config",
        "-c",
        help="Path to the JSON watch configuration.",
    ),
    db_path: Path = typer.Option(
        Path("spid.db"),
        "--db",
        "-d",
        help="Path of the encrypted database to create.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing database.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
) -> None:
    """
    Initialize a new database from a watch configuration.

    Verifies that every watch path can be read, asks twice for the
    encryption passphrase and writes an empty database.
    """
    configure_logging(verbose)

    if db_path.exists() and not force:
        console.print(
            f"[red]Error:[/red] Database already exists: {db_path}"
        )
        console.print("[dim]Tip: Use --force to overwrite it.[/dim]")
        raise typer.Exit(1)

    try:
        config = WatchConfig.from_file(config_path)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print("Verifying we can read watch paths...")
    results = verify_watch_paths(config.watch_paths)
    report = ScanReport(console=console)
    report.display_watch_check(results)

    failed = [path for path, ok, _ in results if not ok]
    if failed:
        console.print(
            f"[red]Error:[/red] {len(failed)} watch path(s) cannot be read."
        )
        raise typer.Exit(1)

    try:
        passphrase = prompt_passphrase("Encryption passphrase")
        confirmation = prompt_passphrase("Again, please")
        if passphrase != confirmation:
            console.print("[red]Error:[/red] Passphrases do not match.")
            raise typer.Exit(1)

        state = sentinel.new(os.path.abspath(p) for p in config.watch_paths)
        sentinel.save(state, db_path, passphrase)

    except KeyboardInterrupt:
        console.print("\n[yellow]Init interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except SpidError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(
        f"[green]Successfully created {db_path}.[/green] "
        f"You can now safely delete {config_path} and use [bold]spid scan[/bold]."
    )


@app.command()
def scan(
    db_path: Path = typer.Option(
        Path("spid.db"),
        "--db",
        "-d",
        help="Path of the encrypted database.",
    ),
    follow_symlinks: bool = typer.Option(
        False,
        "--follow-symlinks",
        help="Follow symlinks found inside watched directories.",
    ),
    full_digests: bool = typer.Option(
        False,
        "--full-digests",
        help="Show complete digests instead of 16-character prefixes.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
) -> None:
    """
    Scan the watched paths and record the results.

    Decrypts the database, reports created and modified files, prints the
    history of all scans and saves the updated database.
    """
    configure_logging(verbose)

    if not db_path.exists():
        console.print(f"[red]Error:[/red] Database does not exist: {db_path}")
        console.print("[dim]Tip: Run spid init first.[/dim]")
        raise typer.Exit(1)

    # Create scan log if log file specified
    scan_logger: Optional[ScanLogger] = None
    if log_file:
        try:
            scan_logger = ScanLogger(log_file, db_path=db_path)
        except OSError as e:
            console.print(
                f"[yellow]Warning:[/yellow] Cannot write log file: {e}. "
                "Continuing without logging."
            )
            scan_logger = None

    report = ScanReport(console=console, digest_length=None if full_digests else 16)
    started = time.monotonic()

    try:
        passphrase = prompt_passphrase(f"Passphrase for {db_path}")
        state = sentinel.load(db_path, passphrase)
        events, state = sentinel.scan(state, follow_symlinks=follow_symlinks)

        report.display_scan_results(events, state.scans[-1].timestamp)
        report.display_history(state.scans)

        sentinel.save(state, db_path, passphrase)

        if scan_logger is not None:
            write_scan_log(scan_logger, events, state, time.monotonic() - started)

    except KeyboardInterrupt:
        console.print("\n[yellow]Scan interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except SpidError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

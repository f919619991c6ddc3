"""Terminal reporting for spid scans.

This module provides the ScanReport class, a Rich-based presenter for watch
path verification, the events of a scan and the full scan history.

Example:
    from spid.ui import ScanReport

    report = ScanReport()
    report.display_scan_results(events, state.scans[-1].timestamp)
    report.display_history(state.scans)
"""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from spid.models import Event, EventType, ScanRecord


class ScanReport:
    """Rich-based presenter for scan output.

    Args:
        console: Optional Rich Console instance for output. If None, creates
            a new Console. Pass a custom Console for testing (e.g., with
            StringIO file for output capture).
        digest_length: Number of hex characters of each digest to show, or
            None for full digests.

    Attributes:
        console: The Rich Console instance used for all output.
    """

    def __init__(
        self, console: Optional[Console] = None, digest_length: Optional[int] = 16
    ) -> None:
        self.console = console or Console()
        self.digest_length = digest_length

    def display_watch_check(self, results: Sequence[Tuple[str, bool, str]]) -> None:
        """Display the readability check of configured watch paths.

        Args:
            results: (path, ok, detail) tuples from verify_watch_paths().
        """
        table = Table(title="Watch Paths", show_header=True, header_style="bold")
        table.add_column("Path", style="white")
        table.add_column("Status", justify="center")
        table.add_column("Detail", style="dim")

        for path, ok, detail in results:
            status = "[green]SUCCESS[/green]" if ok else "[red]FAILED[/red]"
            table.add_row(path, status, detail)

        self.console.print(table)

    def display_scan_results(self, events: List[Event], timestamp: datetime) -> None:
        """Display the events produced by the current scan.

        Args:
            events: Events of this scan, in walk order.
            timestamp: Time of the scan.
        """
        created = sum(1 for e in events if e.event_type is EventType.CREATED)
        modified = len(events) - created
        header_text = (
            f"Scan time: {self._format_timestamp(timestamp)}\n"
            f"Created: {created:,}\n"
            f"Modified: {modified:,}"
        )
        border = "red" if modified else "blue"
        self.console.print(Panel(header_text, title="Scan Results", border_style=border))

        if not events:
            self.console.print("[green]No changes detected.[/green]")
            return

        self.console.print(self._build_event_table(events))

    def display_history(self, scans: List[ScanRecord]) -> None:
        """Display every recorded scan, oldest first.

        Args:
            scans: The scan history of a SentinelState.
        """
        self.console.print(f"\n[bold]Prior scans ({len(scans)}):[/bold]")

        if not scans:
            self.console.print("[dim]No scans recorded yet.[/dim]")
            return

        for record in scans:
            title = f"[{self._format_timestamp(record.timestamp)}]"
            if not record.events:
                self.console.print(f"\n{title}")
                self.console.print("    [dim]No changes detected.[/dim]")
                continue
            self.console.print(self._build_event_table(record.events, title=title))

    def _build_event_table(
        self, events: Sequence[Event], title: Optional[str] = None
    ) -> Table:
        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("Event", style="magenta", no_wrap=True)
        table.add_column("File", style="white")
        table.add_column("Old Digest", style="dim")
        table.add_column("New Digest", style="cyan")

        for event in events:
            table.add_row(
                self._format_event_type(event.event_type),
                self._format_path(event.path),
                self._format_digest(event.old_digest),
                self._format_digest(event.new_digest),
            )
        return table

    def _format_event_type(self, event_type: EventType) -> str:
        """Color-code an event tag: modifications red, creations yellow."""
        if event_type is EventType.MODIFIED:
            return f"[red]{event_type.value}[/red]"
        return f"[yellow]{event_type.value}[/yellow]"

    def _format_path(self, path: str) -> str:
        """Render undecodable file name bytes as escapes instead of failing."""
        return escape(path.encode("utf-8", "backslashreplace").decode("utf-8"))

    def _format_digest(self, digest: str) -> str:
        if not digest:
            return "-"
        if self.digest_length is None:
            return digest
        return digest[:self.digest_length]

    def _format_timestamp(self, dt: datetime) -> str:
        """Format a datetime in local time as 'YYYY-MM-DD HH:MM:SS'."""
        if dt.tzinfo is not None:
            dt = dt.astimezone()
        return dt.strftime("%Y-%m-%d %H:%M:%S")

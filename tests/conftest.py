"""Pytest fixtures for spid tests."""

import io
import json
import os
import platform
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Generator, Optional

import pytest
from rich.console import Console

from spid.models import Event, EventType, ScanRecord, SentinelState
from spid.ui import ScanReport


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: end-to-end workflow tests")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def watched_tree(temp_dir: Path) -> Path:
    """Create a nested directory tree to watch.

    Creates:
        temp_dir/watched/
        ├── a.txt
        ├── b.txt
        └── sub/
            ├── c.txt
            └── deeper/
                └── d.bin

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Path to the watched directory.
    """
    root = temp_dir / "watched"
    deeper = root / "sub" / "deeper"
    deeper.mkdir(parents=True)

    (root / "a.txt").write_text("alpha")
    (root / "b.txt").write_text("bravo")
    (root / "sub" / "c.txt").write_text("charlie")
    (deeper / "d.bin").write_bytes(bytes(range(256)))

    return root


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Return a clock that advances one minute per call, starting 2024-01-01 UTC."""
    start = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    calls = {"count": 0}

    def clock() -> datetime:
        value = start + timedelta(minutes=calls["count"])
        calls["count"] += 1
        return value

    return clock


@pytest.fixture
def sample_state() -> SentinelState:
    """Create a SentinelState with three scans of history.

    Returns:
        SentinelState covering every event type and an empty scan record.
    """
    digest_a = "a" * 64
    digest_b = "b" * 64
    digest_c = "c" * 64

    return SentinelState(
        watch_paths=("/srv/www", "/etc/hosts"),
        known_objects={
            "/srv/www/index.html": digest_b,
            "/etc/hosts": digest_c,
        },
        scans=[
            ScanRecord(
                timestamp=datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
                events=(
                    Event(EventType.CREATED, "/srv/www/index.html", "", digest_a),
                    Event(EventType.CREATED, "/etc/hosts", "", digest_c),
                ),
            ),
            ScanRecord(
                timestamp=datetime(2024, 1, 2, 8, 30, 15, 123456, tzinfo=timezone.utc),
                events=(
                    Event(EventType.MODIFIED, "/srv/www/index.html", digest_a, digest_b),
                ),
            ),
            ScanRecord(
                timestamp=datetime(2024, 1, 3, 8, 30, 15, tzinfo=timezone.utc),
                events=(),
            ),
        ],
    )


@pytest.fixture
def restricted_file(temp_dir: Path) -> Generator[Optional[Path], None, None]:
    """Create a file with no read permissions.

    Yields None where permissions cannot be enforced: on Windows, and when
    running as root (root ignores file modes).

    Args:
        temp_dir: Temporary directory fixture.

    Yields:
        Path to the restricted file, or None if permissions cannot be set.
    """
    if platform.system() == "Windows" or os.geteuid() == 0:
        yield None
        return

    restricted = temp_dir / "restricted.txt"
    restricted.write_text("secret content")

    original_mode = restricted.stat().st_mode
    os.chmod(restricted, 0o000)

    try:
        yield restricted
    finally:
        # Restore permissions for cleanup
        os.chmod(restricted, original_mode)


@pytest.fixture
def report_with_captured_output() -> ScanReport:
    """Create a ScanReport whose Console writes to a StringIO.

    Access captured output via: report.console.file.getvalue()

    Returns:
        ScanReport instance with StringIO-backed Console for output inspection.
    """
    output = io.StringIO()
    console = Console(file=output, force_terminal=False, width=200)
    return ScanReport(console=console)


def write_config(path: Path, watch_paths: list) -> Path:
    """Write a JSON watch configuration file.

    Args:
        path: Destination of the config file.
        watch_paths: Paths to watch.

    Returns:
        The config file path.
    """
    path.write_text(json.dumps({"watch_paths": [str(p) for p in watch_paths]}))
    return path


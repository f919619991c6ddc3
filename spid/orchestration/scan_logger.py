"""ScanLogger for writing a plain-text record of a scan run.

This module provides the ScanLogger class that writes a sectioned log file
for one ``spid scan`` invocation: a header, the events of the scan, the full
scan history and a short summary.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from spid.models import Event, ScanRecord, SentinelState


class ScanLogger:
    """Logger for scan runs with a structured output format.

    Usage:
        with ScanLogger(log_path, db_path=db_path) as scan_log:
            scan_log.log_header()
            scan_log.log_scan(events, record)
            scan_log.log_history(state.scans)
            scan_log.log_summary(state, duration)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(
        self,
        log_file_path: Optional[Path] = None,
        db_path: Optional[Path] = None,
    ) -> None:
        """Initialize the ScanLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            db_path: Path of the state database being scanned (used in header).

        Raises:
            OSError: If the log file path is not writable.
        """
        self._db_path = db_path
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"spid_scan_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file's parent directory exists.

        Raises:
            OSError: If the parent directory doesn't exist or is not a directory.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")

    def __enter__(self) -> "ScanLogger":
        """Enter the context manager, opening the log file.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(
                self._log_file_path, "w", encoding="utf-8", errors="backslashreplace"
            )
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the context manager, closing the log file."""
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        """Get the path to the log file."""
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, start timestamp and database path."""
        self._write_separator()
        self._write_line("spid - Integrity Scan Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        if self._db_path is not None:
            self._write_line(f"Database: {self._db_path}")
        self._write_line("")

    def log_scan(self, events: Sequence[Event], record: ScanRecord) -> None:
        """Write the events of the current scan.

        Args:
            events: Events produced by this scan.
            record: The ScanRecord committed for this scan.
        """
        self._write_separator()
        self._write_line("SCAN RESULTS")
        self._write_separator()
        self._write_line(f"Scan time: {self._format_timestamp(record.timestamp)}")
        self._write_line(f"Events: {len(events)}")
        self._write_line("")

        if not events:
            self._write_line("No changes detected.", indent=2)
        for event in events:
            self._write_event(event, indent=2)
        self._write_line("")

    def log_history(self, scans: List[ScanRecord]) -> None:
        """Write every recorded scan, oldest first."""
        self._write_separator()
        self._write_line("SCAN HISTORY")
        self._write_separator()

        for record in scans:
            self._write_line(f"[{self._format_timestamp(record.timestamp)}]")
            if not record.events:
                self._write_line("No changes detected.", indent=4)
            for event in record.events:
                self._write_event(event, indent=4)
        self._write_line("")

    def log_summary(self, state: SentinelState, duration_seconds: float) -> None:
        """Write the summary section.

        Args:
            state: The state after the scan.
            duration_seconds: Wall-clock duration of the run.
        """
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Watch entries: {len(state.watch_paths)}")
        self._write_line(f"Known objects: {len(state.known_objects):,}")
        self._write_line(f"Scans recorded: {len(state.scans)}")
        self._write_line(f"Duration: {duration_seconds:.2f}s")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _write_event(self, event: Event, indent: int) -> None:
        old_digest = event.old_digest or "-"
        self._write_line(
            f"[{event.event_type.value} {event.path}] {old_digest} -> {event.new_digest}",
            indent=indent,
        )

    def _format_timestamp(self, dt: datetime) -> str:
        """Format a datetime (converted to local time) as 'YYYY-MM-DD HH:MM:SS'."""
        if dt.tzinfo is not None:
            dt = dt.astimezone()
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation.

        Args:
            text: The text to write.
            indent: Number of spaces to indent the line.
        """
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)

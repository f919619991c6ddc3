"""Unit tests for ScanLogger."""

import os
import re
from pathlib import Path

import pytest

from spid.models import Event, EventType, ScanRecord, SentinelState
from spid.orchestration import ScanLogger


class TestScanLoggerBasic:
    """Test basic ScanLogger functionality."""

    def test_log_file_creation_with_auto_generated_filename(self, temp_dir: Path):
        """Test that log file is created with auto-generated timestamped filename."""
        original_cwd = os.getcwd()
        try:
            os.chdir(temp_dir)
            with ScanLogger() as scan_log:
                log_path = scan_log.get_log_path()
                assert log_path.parent == Path.cwd()
                pattern = r"spid_scan_\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.log"
                assert re.match(pattern, log_path.name)
        finally:
            os.chdir(original_cwd)

    def test_header(self, temp_dir: Path):
        log_path = temp_dir / "scan.log"
        with ScanLogger(log_file_path=log_path, db_path=Path("spid.db")) as scan_log:
            scan_log.log_header()

        content = log_path.read_text()
        assert "spid - Integrity Scan Log" in content
        assert "Database: spid.db" in content
        assert "=" * 65 in content

    def test_missing_parent_directory(self, temp_dir: Path):
        with pytest.raises(OSError, match="Parent directory does not exist"):
            ScanLogger(log_file_path=temp_dir / "missing" / "scan.log")

    def test_write_after_close_warns(self, temp_dir: Path, capsys):
        log_path = temp_dir / "scan.log"
        scan_log = ScanLogger(log_file_path=log_path)
        with scan_log:
            pass

        scan_log.log_header()

        assert "closed log file" in capsys.readouterr().err


class TestScanLoggerSections:
    """Content of the scan, history and summary sections."""

    def test_scan_section(self, temp_dir: Path, sample_state: SentinelState):
        log_path = temp_dir / "scan.log"
        record = sample_state.scans[1]

        with ScanLogger(log_file_path=log_path) as scan_log:
            scan_log.log_scan(list(record.events), record)

        content = log_path.read_text()
        assert "SCAN RESULTS" in content
        assert "Events: 1" in content
        assert f"[EV_MODIFY /srv/www/index.html] {'a' * 64} -> {'b' * 64}" in content

    def test_scan_section_no_events(self, temp_dir: Path, sample_state: SentinelState):
        log_path = temp_dir / "scan.log"

        with ScanLogger(log_file_path=log_path) as scan_log:
            scan_log.log_scan([], sample_state.scans[2])

        assert "No changes detected." in log_path.read_text()

    def test_history_section(self, temp_dir: Path, sample_state: SentinelState):
        log_path = temp_dir / "scan.log"

        with ScanLogger(log_file_path=log_path) as scan_log:
            scan_log.log_history(sample_state.scans)

        content = log_path.read_text()
        assert "SCAN HISTORY" in content
        assert f"[EV_CREATE /etc/hosts] - -> {'c' * 64}" in content
        assert content.count("EV_CREATE") == 2
        assert content.count("No changes detected.") == 1

    def test_summary_section(self, temp_dir: Path, sample_state: SentinelState):
        log_path = temp_dir / "scan.log"

        with ScanLogger(log_file_path=log_path) as scan_log:
            scan_log.log_summary(sample_state, 1.5)

        content = log_path.read_text()
        assert "SUMMARY" in content
        assert "Watch entries: 2" in content
        assert "Known objects: 2" in content
        assert "Scans recorded: 3" in content
        assert "Duration: 1.50s" in content
        assert f"Log file: {log_path}" in content

    def test_undecodable_file_name(self, temp_dir: Path, sample_state: SentinelState):
        log_path = temp_dir / "scan.log"
        path = "/srv/" + b"bad\xffname".decode("utf-8", "surrogateescape")
        record = ScanRecord(sample_state.scans[0].timestamp, (Event(EventType.CREATED, path, "", "d" * 64),))

        with ScanLogger(log_file_path=log_path) as scan_log:
            scan_log.log_scan(list(record.events), record)

        assert "[EV_CREATE /srv/bad\\udcffname]" in log_path.read_text()

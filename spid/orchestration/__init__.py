"""Workflow support package for spid.

This package contains components used around a scan run:
- ScanLogger: Structured logging of a scan run to a text log file.
"""

from spid.orchestration.scan_logger import ScanLogger

__all__ = ["ScanLogger"]

"""Terminal output package for spid."""

from spid.ui.scan_report import ScanReport

__all__ = ["ScanReport"]

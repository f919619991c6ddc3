"""
Models package for spid.

This package provides convenient imports for all data models:
- EventType: Enum for change categories
- Event: Single classified file change
- ScanRecord: Timestamped events of one scan
- SentinelState: Watch set, known-object index and history
- ScanResult: Events plus resulting state
"""

from .event_type import EventType
from .data_models import (
    Event,
    ScanRecord,
    ScanResult,
    SentinelState,
)

__all__ = [
    "EventType",
    "Event",
    "ScanRecord",
    "ScanResult",
    "SentinelState",
]

"""
Core data models for spid.

This module contains the following dataclasses:
- Event: A single classified file change
- ScanRecord: The timestamped events of one scan invocation
- SentinelState: Watch set, known-object index and scan history
- ScanResult: Events of one scan paired with the resulting state
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Tuple

from .event_type import EventType


@dataclass(frozen=True)
class Event:
    """Represents a change detected for one file."""
    event_type: EventType             # Created or Modified
    path: str                         # Absolute file path
    old_digest: str                   # Previous digest ("" for Created)
    new_digest: str                   # Digest observed by this scan


@dataclass(frozen=True)
class ScanRecord:
    """Immutable log entry for one scan invocation."""
    timestamp: datetime               # When the scan completed (UTC)
    events: Tuple[Event, ...] = ()    # Events in walk order


@dataclass
class SentinelState:
    """The complete persisted state of a sentinel.

    The watch set is fixed at creation. The known-object index and the scan
    history are only ever replaced by the integrity scanner, which builds a
    new SentinelState per successful scan.
    """
    watch_paths: Tuple[str, ...]                                  # Watch set
    known_objects: Dict[str, str] = field(default_factory=dict)   # path -> digest
    scans: List[ScanRecord] = field(default_factory=list)         # Scan history

    def __post_init__(self) -> None:
        self.watch_paths = tuple(self.watch_paths)

    @classmethod
    def new(cls, watch_paths: Iterable[str]) -> "SentinelState":
        """Create an empty state watching ``watch_paths``."""
        return cls(watch_paths=tuple(str(p) for p in watch_paths))


@dataclass(frozen=True)
class ScanResult:
    """Events produced by one scan and the state they were committed to."""
    events: List[Event]
    state: SentinelState

"""
EventType enum for integrity events.

A scan classifies every visited file into one of two change kinds:
1. Created - the path was not in the known-object index
2. Modified - the path was known but its digest changed

Unchanged files produce no event and deletions are not tracked.
"""

from enum import Enum


class EventType(Enum):
    """Change categories emitted by the integrity scanner."""
    CREATED = "EV_CREATE"     # Path seen for the first time
    MODIFIED = "EV_MODIFY"    # Known path whose digest changed

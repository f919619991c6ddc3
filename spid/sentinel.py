"""High-level operations on a sentinel.

These four functions are the whole public workflow:

    state = new(["/etc", "/usr/local/bin"])
    save(state, "spid.db", passphrase)

    state = load("spid.db", passphrase)
    events, state = scan(state)
    save(state, "spid.db", passphrase)
"""

from pathlib import Path
from typing import Iterable, List, Tuple, Union

from spid.models import Event, SentinelState
from spid.scanning import IntegrityScanner
from spid.storage import StateStore


def new(watch_paths: Iterable[str]) -> SentinelState:
    """Create an empty state for the given watch set."""
    return SentinelState.new(watch_paths)


def scan(
    state: SentinelState, follow_symlinks: bool = False
) -> Tuple[List[Event], SentinelState]:
    """Run one scan and return its events with the updated state.

    ``state`` itself is left unchanged; on ReadError nothing is committed.
    """
    result = IntegrityScanner(follow_symlinks=follow_symlinks).scan(state)
    return result.events, result.state


def save(state: SentinelState, path: Union[str, Path], passphrase: str) -> None:
    """Seal ``state`` under ``passphrase`` and write it atomically to ``path``."""
    StateStore(path).save(state, passphrase)


def load(path: Union[str, Path], passphrase: str) -> SentinelState:
    """Read and open the state file at ``path``."""
    return StateStore(path).load(passphrase)

"""Integrity scanning of a watch set.

This module provides the IntegrityScanner class, which walks every entry of a
SentinelState's watch set, digests each regular file and classifies it against
the known-object index.

Example:
    >>> from spid.models import SentinelState
    >>> from spid.scanning import IntegrityScanner
    >>> state = SentinelState.new(["/etc"])
    >>> result = IntegrityScanner().scan(state)
    >>> for event in result.events:
    ...     print(event.event_type.value, event.path)
"""

import logging
import os
import stat
from datetime import datetime, timezone
from typing import Callable, Dict, FrozenSet, Iterator, List, Optional, Tuple

from spid.exceptions import ReadError
from spid.models import Event, EventType, ScanRecord, ScanResult, SentinelState

from .file_hasher import FileHasher

logger = logging.getLogger("spid.scanning")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _raise_walk_error(error: OSError) -> None:
    """os.walk error hook: an unreadable subdirectory aborts the scan."""
    raise ReadError(error.filename or "<unknown>", error.strerror or str(error))


class IntegrityScanner:
    """Walks a watch set and detects created and modified files.

    Directory traversal is deterministic: directory and file names are sorted
    at every level, and the files of a directory are visited before its
    subdirectories. Only regular files are diff targets.

    Symbolic links met while recursing into a watched directory are skipped
    unless ``follow_symlinks`` is set; followed directory links are tracked by
    (device, inode) so a link back to an ancestor cannot loop. A watch entry
    that is itself a symlink is always followed, since the user named it.

    A scan never mutates the state it is given. Index updates and the new
    ScanRecord go into a fresh SentinelState that is only built once the whole
    walk succeeded, so a ReadError leaves the caller's state untouched.

    Attributes:
        follow_symlinks: Whether symlinks inside watched directories are
            followed.

    Example:
        >>> scanner = IntegrityScanner(follow_symlinks=False)
        >>> result = scanner.scan(state)
        >>> state = result.state
    """

    def __init__(
        self,
        file_hasher: Optional[FileHasher] = None,
        follow_symlinks: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize the IntegrityScanner.

        Args:
            file_hasher: Optional FileHasher instance. If not provided,
                a new instance will be created.
            follow_symlinks: Follow symlinks found inside watched directories.
            clock: Callable returning the timestamp of a scan record.
                Defaults to the current UTC time.
        """
        self._file_hasher = file_hasher if file_hasher is not None else FileHasher()
        self.follow_symlinks = follow_symlinks
        self._clock = clock if clock is not None else _utc_now

    def scan(self, state: SentinelState) -> ScanResult:
        """Scan every watch entry and commit the results to a new state.

        Args:
            state: The current SentinelState. It is not modified.

        Returns:
            ScanResult with the events of this pass (possibly empty) and the
            new SentinelState, whose history ends with this scan's record.

        Raises:
            ReadError: If any watch entry, directory or file cannot be read.
                Nothing is committed in that case.
        """
        known: Dict[str, str] = dict(state.known_objects)
        events: List[Event] = []
        files_seen = 0

        for entry in state.watch_paths:
            for file_path in self.iter_files(entry):
                files_seen += 1
                digest = self._file_hasher.hash_file(file_path)
                previous = known.get(file_path)

                if previous is None:
                    events.append(
                        Event(EventType.CREATED, file_path, "", digest)
                    )
                elif previous != digest:
                    events.append(
                        Event(EventType.MODIFIED, file_path, previous, digest)
                    )

                known[file_path] = digest

        record = ScanRecord(timestamp=self._clock(), events=tuple(events))
        new_state = SentinelState(
            watch_paths=state.watch_paths,
            known_objects=known,
            scans=list(state.scans) + [record],
        )

        logger.info(
            "Scanned %d file(s) in %d watch entr%s: %d event(s)",
            files_seen,
            len(state.watch_paths),
            "y" if len(state.watch_paths) == 1 else "ies",
            len(events),
        )
        return ScanResult(events=events, state=new_state)

    def iter_files(self, entry: str) -> Iterator[str]:
        """Yield the absolute paths of all regular files under a watch entry.

        Args:
            entry: A watched file or directory path.

        Yields:
            Absolute file paths in deterministic walk order.

        Raises:
            ReadError: If the entry or one of its subdirectories is
                inaccessible.
        """
        abs_entry = os.path.abspath(entry)
        try:
            entry_stat = os.stat(abs_entry)
        except FileNotFoundError:
            raise ReadError(entry, "file not found")
        except PermissionError:
            raise ReadError(entry, "permission denied")
        except OSError as e:
            raise ReadError(entry, e.strerror or str(e)) from e

        if stat.S_ISDIR(entry_stat.st_mode):
            yield from self._walk_directory(abs_entry, entry_stat)
        elif stat.S_ISREG(entry_stat.st_mode):
            yield abs_entry
        else:
            logger.debug("Skipping non-regular watch entry: %s", abs_entry)

    def _walk_directory(self, root: str, root_stat: os.stat_result) -> Iterator[str]:
        """Recursively yield regular files below ``root``."""
        # (device, inode) of every directory on the path from root to each pending dirpath
        ancestors: Dict[str, FrozenSet[Tuple[int, int]]] = {
            root: frozenset([(root_stat.st_dev, root_stat.st_ino)])
        }

        for dirpath, dirnames, filenames in os.walk(
            root, onerror=_raise_walk_error, followlinks=self.follow_symlinks
        ):
            dirnames[:] = self._filter_subdirectories(
                dirpath, sorted(dirnames), ancestors.pop(dirpath), ancestors
            )

            for filename in sorted(filenames):
                file_path = os.path.join(dirpath, filename)
                if self._is_regular_file(file_path):
                    yield file_path

    def _filter_subdirectories(
        self,
        dirpath: str,
        dirnames: List[str],
        chain: FrozenSet[Tuple[int, int]],
        ancestors: Dict[str, FrozenSet[Tuple[int, int]]],
    ) -> List[str]:
        """Return the subdirectories to descend into, in order.

        A subdirectory is cut only when it resolves to a directory on its own
        ancestor chain. The same directory reached through a link and through
        its real path is walked under both names.
        """
        kept: List[str] = []

        for dirname in dirnames:
            dir_full_path = os.path.join(dirpath, dirname)
            is_link = os.path.islink(dir_full_path)

            if is_link and not self.follow_symlinks:
                logger.debug("Skipping directory symlink: %s", dir_full_path)
                continue

            try:
                dir_stat = os.stat(dir_full_path)
            except OSError as e:
                if is_link:
                    logger.debug("Skipping unresolvable symlink: %s", dir_full_path)
                    continue
                raise ReadError(dir_full_path, e.strerror or str(e)) from e

            dir_id = (dir_stat.st_dev, dir_stat.st_ino)
            if dir_id in chain:
                logger.debug("Skipping directory cycle: %s", dir_full_path)
                continue
            ancestors[dir_full_path] = chain | {dir_id}
            kept.append(dirname)

        return kept

    def _is_regular_file(self, file_path: str) -> bool:
        """Check whether a directory entry is a file to digest."""
        try:
            file_stat = os.lstat(file_path)
        except OSError as e:
            raise ReadError(file_path, e.strerror or str(e)) from e

        if stat.S_ISLNK(file_stat.st_mode):
            if not self.follow_symlinks:
                logger.debug("Skipping symlink: %s", file_path)
                return False
            try:
                file_stat = os.stat(file_path)
            except OSError:
                logger.debug("Skipping dangling symlink: %s", file_path)
                return False

        if not stat.S_ISREG(file_stat.st_mode):
            logger.debug("Skipping non-regular file: %s", file_path)
            return False
        return True

    @property
    def file_hasher(self) -> FileHasher:
        """Get the FileHasher instance used by this scanner.

        Returns:
            The FileHasher instance.
        """
        return self._file_hasher

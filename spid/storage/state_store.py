"""Persistent storage of sealed SentinelState files.

This module provides the StateStore class that ties the StateCodec and the
CryptoBox to a file on disk. Saves are atomic: the container is written to a
temporary file in the destination directory, flushed to disk and renamed over
the previous file, so a crash mid-write never leaves a truncated database.

Example:
    from spid.storage import StateStore

    store = StateStore(Path("spid.db"))
    store.save(state, passphrase)
    state = store.load(passphrase)
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from spid.exceptions import StorageError
from spid.models import SentinelState

from .crypto_box import CryptoBox, EncryptedContainer
from .state_codec import StateCodec

logger = logging.getLogger("spid.storage")


class StateStore:
    """Saves and loads one encrypted state file.

    Concurrent processes writing the same path are not coordinated: the last
    writer wins.

    Attributes:
        path: Location of the state file.
    """

    def __init__(
        self,
        path: Union[str, Path],
        codec: Optional[StateCodec] = None,
        crypto_box: Optional[CryptoBox] = None,
    ) -> None:
        """Initialize the StateStore.

        Args:
            path: Location of the state file.
            codec: Optional StateCodec; a default instance is created if omitted.
            crypto_box: Optional CryptoBox; a default instance is created if omitted.
        """
        self.path = Path(path)
        self._codec = codec if codec is not None else StateCodec()
        self._crypto_box = crypto_box if crypto_box is not None else CryptoBox()

    def exists(self) -> bool:
        """Check whether a state file is present at ``path``."""
        return self.path.exists()

    def save(self, state: SentinelState, passphrase: str) -> None:
        """Encode, seal and atomically write a state.

        Args:
            state: The state to persist.
            passphrase: Passphrase the state is sealed under.

        Raises:
            StorageError: If the file cannot be written. The previous file,
                if any, is left intact.
        """
        container = self._crypto_box.seal(self._codec.encode(state), passphrase)
        self._write_atomic(container.to_bytes())
        logger.debug(
            "Saved state to %s (%d known objects, %d scans)",
            self.path,
            len(state.known_objects),
            len(state.scans),
        )

    def load(self, passphrase: str) -> SentinelState:
        """Read, open and decode a state.

        Args:
            passphrase: Passphrase the state was sealed under.

        Returns:
            The decoded SentinelState.

        Raises:
            StorageError: If the file cannot be read.
            AuthenticationError: On a wrong passphrase or a tampered file.
            CorruptStateError: If the decrypted data is not a valid state.
        """
        try:
            data = self.path.read_bytes()
        except FileNotFoundError:
            raise StorageError(self.path, "file not found")
        except PermissionError:
            raise StorageError(self.path, "permission denied")
        except OSError as e:
            raise StorageError(self.path, e.strerror or str(e)) from e

        container = EncryptedContainer.from_bytes(data)
        state = self._codec.decode(self._crypto_box.open(container, passphrase))
        logger.debug("Loaded state from %s (%d scans)", self.path, len(state.scans))
        return state

    def _write_atomic(self, data: bytes) -> None:
        """Write ``data`` to a temp file and rename it over ``path``."""
        directory = self.path.parent
        temp_name: Optional[str] = None

        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_name, self.path)
            temp_name = None
        except OSError as e:
            if getattr(e, "errno", None) == 28:
                raise StorageError(self.path, "no space left on device") from e
            raise StorageError(self.path, e.strerror or str(e)) from e
        finally:
            if temp_name is not None:
                try:
                    os.unlink(temp_name)
                except OSError:
                    logger.warning("Could not remove temporary file %s", temp_name)

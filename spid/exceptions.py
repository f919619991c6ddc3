"""Exception hierarchy for spid.

Every failure the core can report derives from SpidError so that callers
(the CLI in particular) can abort a command with a single except clause:

- ReadError: a watched file or directory could not be read during a scan.
- CorruptStateError: decrypted bytes do not decode as a SentinelState.
- AuthenticationError: a sealed container failed authenticated decryption.
- StorageError: the state file could not be read or written.
- ConfigError: the watch configuration is missing or malformed.
"""

from pathlib import Path
from typing import Optional, Union


class SpidError(Exception):
    """Base class for all spid errors."""


class ReadError(SpidError):
    """A watched path could not be opened or read during a scan."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot read {self.path}: {reason}")


class CorruptStateError(SpidError):
    """The decrypted state does not parse as a valid SentinelState."""


class AuthenticationError(SpidError):
    """The state container could not be authenticated.

    Raised for a wrong passphrase and for any corruption or tampering alike;
    the two cases are indistinguishable by construction.
    """

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or "Could not decrypt state: wrong passphrase or corrupted file"
        )


class StorageError(SpidError):
    """The state file could not be read or written."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Storage error for {self.path}: {reason}")


class ConfigError(SpidError):
    """The watch configuration is missing, unreadable or malformed."""

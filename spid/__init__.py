"""spid - simple portable intrusion detection.

Detects content changes to a fixed set of watched files and directories
across runs, and keeps the detection history in a passphrase-encrypted,
tamper-evident database.
"""

__version__ = "0.1.0"

from .exceptions import (
    AuthenticationError,
    ConfigError,
    CorruptStateError,
    ReadError,
    SpidError,
    StorageError,
)
from .models import (
    Event,
    EventType,
    ScanRecord,
    ScanResult,
    SentinelState,
)

__all__ = [
    "__version__",
    "AuthenticationError",
    "ConfigError",
    "CorruptStateError",
    "ReadError",
    "SpidError",
    "StorageError",
    "Event",
    "EventType",
    "ScanRecord",
    "ScanResult",
    "SentinelState",
]


def main() -> None:
    """Entry point for the spid CLI application.

    Imports and runs the Typer app from the spid.cli module.
    """
    from spid.cli import app
    app()

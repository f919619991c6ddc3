"""File scanning package for spid.

This package provides utilities for digesting files and scanning a watch set.
It contains two main classes:

- FileHasher: Computes SHA256 digests of files by streaming their contents.
- IntegrityScanner: Walks a watch set, digests every regular file and
  classifies it as created or modified against the known-object index.

Example:
    >>> from spid.models import SentinelState
    >>> from spid.scanning import IntegrityScanner
    >>>
    >>> state = SentinelState.new(["/etc/hosts", "/usr/local/bin"])
    >>> result = IntegrityScanner().scan(state)
    >>> state = result.state
"""

from .file_hasher import FileHasher
from .integrity_scanner import IntegrityScanner

__all__ = ["FileHasher", "IntegrityScanner"]

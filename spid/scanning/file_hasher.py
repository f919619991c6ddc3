"""File hashing utility for integrity checks.

This module provides the FileHasher class for computing SHA256 digests of
files. Files are streamed in fixed-size chunks so they never need to fit in
memory.

Example:
    >>> from spid.scanning import FileHasher
    >>> hasher = FileHasher()
    >>> digest = hasher.hash_file(Path("/etc/hosts"))
    >>> print(f"SHA256: {digest}")
"""

import hashlib
import logging
from pathlib import Path
from typing import Union

from spid.exceptions import ReadError

# Buffer size for chunked file reading (8KB)
CHUNK_SIZE = 8192

logger = logging.getLogger("spid.scanning")


class FileHasher:
    """Computes SHA256 digests of files.

    Unlike a deduplication hasher this class keeps no cache: a cache keyed on
    modification time would hide a content change made with a restored
    mtime, which is exactly what an integrity check has to catch.

    Attributes:
        chunk_size: Number of bytes read per iteration.

    Example:
        >>> hasher = FileHasher()
        >>> try:
        ...     digest = hasher.hash_file(Path("file.txt"))
        ... except ReadError as e:
        ...     print(e.reason)
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE) -> None:
        """Initialize the FileHasher.

        Args:
            chunk_size: Number of bytes read per iteration. Must be positive.

        Raises:
            ValueError: If chunk_size is not positive.
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    def hash_file(self, file_path: Union[str, Path]) -> str:
        """Compute the SHA256 digest of a file.

        Args:
            file_path: Path to the file to hash.

        Returns:
            The lowercase SHA256 hex digest (64 characters).

        Raises:
            ReadError: If the file cannot be opened or a read fails. No
                partial digest is ever returned.
        """
        sha256_hash = hashlib.sha256()

        try:
            with open(file_path, "rb") as f:
                while True:
                    chunk = f.read(self.chunk_size)
                    if not chunk:
                        break
                    sha256_hash.update(chunk)
        except PermissionError:
            raise ReadError(file_path, "permission denied")
        except FileNotFoundError:
            raise ReadError(file_path, "file not found")
        except IsADirectoryError:
            raise ReadError(file_path, "is a directory")
        except OSError as e:
            raise ReadError(file_path, e.strerror or str(e)) from e

        digest = sha256_hash.hexdigest()
        logger.debug("Hashed %s -> %s", file_path, digest)
        return digest

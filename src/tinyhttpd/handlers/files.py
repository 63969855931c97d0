"""
=============================================================================
FILE STORE
=============================================================================

Reads and writes named files under a single root directory. This is the
only part of the server that touches the filesystem.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The file name comes straight from the URL, so it is attacker-controlled:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /files/../../etc/passwd HTTP/1.1                               │
    │                                                                      │
    │  Naive join:   /srv/files/../../etc/passwd  →  /etc/passwd          │
    │                                                                      │
    │  Our protection:                                                    │
    │  1. Resolve the joined path (follows .. and symlinks)               │
    │  2. Check it is still inside the resolved root                      │
    │  3. If not, raise OutsideRootError (the route answers 404)          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    PYTHON PROTECTION:
        full_path = (root / name).resolve()
        full_path.relative_to(root)  # Raises if outside root!

A name the OS cannot represent, such as one with a NUL byte, is refused
the same way as one that escapes.

A name that resolves to the root itself ("/files/") is inside the root;
reading or writing it fails with IsADirectoryError like any other I/O
error.

=============================================================================
WRITE SEMANTICS
=============================================================================

write() truncates and replaces. Posting the same body twice leaves the
same bytes on disk, so repeated uploads are idempotent. There is no
locking: two clients writing the same name at once race at the
filesystem level. Parent directories are never created.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class OutsideRootError(Exception):
    """Raised when a requested name resolves outside the store's root."""

    def __init__(self, name: str, reason: str = "escapes files root"):
        super().__init__(f"Path {reason}: {name!r}")
        self.name = name


class FileStore:
    """
    Byte-level access to files below a root directory.

    Usage:
        store = FileStore("/tmp/data")
        store.write("notes.txt", b"abc")
        store.read("notes.txt")         # b"abc"
        store.read("../etc/passwd")     # OutsideRootError
    """

    def __init__(self, root: Union[str, Path]):
        """
        Args:
            root: Directory holding the files. Must exist.

        Raises:
            ValueError: If root is not a directory.
        """
        # Resolve once; the containment check compares against this
        self.root = Path(root).resolve()

        if not self.root.is_dir():
            raise ValueError(f"Files root is not a directory: {root}")

    def resolve(self, name: str) -> Path:
        """
        Map a name from the URL to an absolute path inside the root.

        Raises:
            OutsideRootError: If the name escapes the root or is not a
                valid path (e.g. contains a NUL byte).
        """
        # The OS refuses NUL in paths; pathlib would raise ValueError
        if "\x00" in name:
            raise OutsideRootError(name, "is not a valid file name")

        full_path = (self.root / name).resolve()

        try:
            full_path.relative_to(self.root)
        except ValueError:
            raise OutsideRootError(name) from None

        return full_path

    def read(self, name: str) -> bytes:
        """
        Return the full contents of a file.

        Raises:
            OutsideRootError: If the name escapes the root.
            OSError: If the file is missing or unreadable.
        """
        return self.resolve(name).read_bytes()

    def write(self, name: str, data: bytes) -> None:
        """
        Create or replace a file with exactly `data`.

        Raises:
            OutsideRootError: If the name escapes the root.
            OSError: If the file cannot be written.
        """
        path = self.resolve(name)
        path.write_bytes(data)
        logger.debug(f"Wrote {len(data)} bytes to {path}")

"""
=============================================================================
CONTENT STORE
=============================================================================

The filesystem side of static file serving. The connection handler only
ever asks two questions of it:

    lookup(path)  →  FileStatus(exists, is_dir)      never raises
    read(path)    →  bytes, or ContentReadError      permission / I/O

Paths passed in are already sanitized and relative to the content root.

=============================================================================
SYMLINKS
=============================================================================

The sanitizer works on the path text only. A symlink inside the content
root can still point outside it:

    templates/
    └── leak.txt -> /etc/passwd

lookup() resolves the real path and reports anything that lands outside
the root as missing, the same check the static handler of a larger server
does with Path.relative_to().

=============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class ContentReadError(Exception):
    """A file exists but its bytes could not be read."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Failed to read {path}: {cause}")
        self.path = path
        self.cause = cause


@dataclass(frozen=True)
class FileStatus:
    """Result of ContentStore.lookup()."""

    exists: bool
    is_dir: bool = False

    @property
    def is_servable(self) -> bool:
        """Only regular files (not directories) are served."""
        return self.exists and not self.is_dir


class ContentStore:
    """
    Read-only view of the content root.

    Holds no mutable state, so one instance is shared by every connection
    thread without locking.
    """

    def __init__(self, root_dir: str):
        """
        Args:
            root_dir: Directory all served files live under.

        Raises:
            ValueError: If root_dir is not a directory.
        """
        self.root_dir = Path(root_dir).resolve()

        if not self.root_dir.is_dir():
            raise ValueError(f"Content root directory does not exist: {root_dir}")

    def full_path(self, relative_path: str) -> Path:
        """Join a sanitized relative path onto the content root."""
        return self.root_dir / relative_path

    def lookup(self, relative_path: str) -> FileStatus:
        """Report whether the path exists and whether it is a directory."""
        try:
            real = self.full_path(relative_path).resolve()
            real.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Symlink escapes content root: {relative_path}")
            return FileStatus(exists=False)
        except (OSError, RuntimeError):
            # RuntimeError: symlink loop on older interpreters
            return FileStatus(exists=False)

        try:
            return FileStatus(exists=real.exists(), is_dir=real.is_dir())
        except OSError:
            return FileStatus(exists=False)

    def read(self, relative_path: str) -> bytes:
        """
        Read a whole file.

        Raises:
            ContentReadError: On permission or I/O failure.
        """
        try:
            return self.full_path(relative_path).read_bytes()
        except OSError as e:
            raise ContentReadError(relative_path, e) from e

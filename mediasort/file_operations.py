"""
Filesystem operations shared by concurrent sort workers.
"""

import errno
import os
import shutil
import threading
from enum import Enum
from pathlib import Path
from typing import Optional

from .constants import get_logger


class MoveResult(Enum):
    """Outcome of relocating one file."""
    MOVED = "moved"
    EXISTS = "exists"


# errno values meaning a hard link cannot be made here, so copy instead.
# EPERM is what filesystems without hard links (FAT, exFAT, some network
# mounts) and Linux protected_hardlinks report. A real permission problem
# resurfaces from the copy or from removing the source, which rolls back.
LINK_UNSUPPORTED = {errno.EXDEV, errno.EPERM, errno.ENOTSUP, errno.EOPNOTSUPP, errno.EMLINK}


class FileOperations:
    """Directory creation and no-clobber moves, safe to call from many threads."""

    def __init__(self):
        self.logger = get_logger()
        self._folder_lock = threading.Lock()

    def ensure_directory(self, directory: Path) -> None:
        """Create directory and parents if missing.

        The existence check runs without the lock; only workers that find the
        directory missing queue up to create it.
        """
        if directory.is_dir():
            return

        with self._folder_lock:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self.logger.warning(f"Could not create directory {directory}: {e}")

    def move_file(self, source: Path, dest: Path) -> MoveResult:
        """Move source to dest without ever replacing an existing dest.

        Raises OSError for failures other than an existing destination.
        """
        try:
            self._move_no_clobber(source, dest)
        except FileExistsError:
            return MoveResult.EXISTS
        return MoveResult.MOVED

    def _move_no_clobber(self, source: Path, dest: Path) -> None:
        # Linking claims the destination name atomically
        try:
            os.link(source, dest, follow_symlinks=False)
        except FileExistsError:
            raise
        except OSError as e:
            if e.errno not in LINK_UNSUPPORTED:
                raise
            self._copy_no_clobber(source, dest)

        try:
            os.unlink(source)
        except OSError:
            # Leave the file only at its source so a re-run can retry it
            dest.unlink(missing_ok=True)
            raise

    @staticmethod
    def _copy_no_clobber(source: Path, dest: Path) -> None:
        """Copy into a newly created dest; used across devices."""
        with open(source, "rb") as src, open(dest, "xb") as dst:
            try:
                shutil.copyfileobj(src, dst)
            except OSError:
                dst.close()
                os.unlink(dest)
                raise
        shutil.copystat(source, dest)

    @staticmethod
    def validate_directory(directory: Path, create: bool = False) -> Optional[str]:
        """Return an error message if directory is unusable, else None."""
        if directory.is_dir():
            return None

        # Never replace an existing non-directory entry
        if not create or directory.exists():
            return f"Not a directory: {directory}"

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return f"Could not create directory {directory}: {e}"
        return None

"""
Content hashing for stable, name-independent file identifiers.
"""

import hashlib
import uuid
from pathlib import Path
from typing import Optional

from .constants import HASH_CHUNK_SIZE, get_logger


class ContentHasher:
    """Stream files through SHA-256 in fixed-size chunks."""

    def __init__(self, chunk_size: int = HASH_CHUNK_SIZE):
        self.chunk_size = chunk_size
        self.logger = get_logger()

    def hash(self, path: Path) -> bytes:
        """Return the SHA-256 digest of a file's content.

        Raises OSError if the file cannot be opened or read. A read that
        returns no bytes ends the stream.
        """
        hasher = hashlib.sha256()
        with open(path, "rb") as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                hasher.update(chunk)
        return hasher.digest()

    def hash_as_uuid(self, path: Path) -> Optional[str]:
        """Render the first 16 digest bytes as canonical upper-case UUID text."""
        try:
            digest = self.hash(path)
        except OSError as e:
            self.logger.warning(f"{path.name}: Failed to open file for hashing: {e}")
            return None
        return str(uuid.UUID(bytes=digest[:16])).upper()

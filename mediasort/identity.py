"""
Identifier resolution for classified media.
"""

from typing import Optional

from .classifier import ClassifiedFile
from .constants import SENTINEL_UUID, get_logger
from .hashing import ContentHasher


class IdentityResolver:
    """Resolve a stable identifier: embedded collection ID, content hash, sentinel."""

    def __init__(self, hasher: Optional[ContentHasher] = None):
        self.hasher = hasher or ContentHasher()
        self.logger = get_logger()

    def resolve(self, media: ClassifiedFile) -> str:
        """Return the identifier for a file. Never fails."""
        collection_id = self._collection_identifier(media)
        if collection_id:
            return collection_id

        content_id = self.hasher.hash_as_uuid(media.path)
        if content_id:
            return content_id

        return SENTINEL_UUID

    def _collection_identifier(self, media: ClassifiedFile) -> Optional[str]:
        """Embedded ID pairing a still photo with its motion clip.

        Videos carry it as a QuickTime metadata key, photos as Apple
        maker-note entry 17; the reader bound at classification knows which.
        """
        value = media.read_collection_identifier()
        if isinstance(value, str) and value:
            self.logger.debug(f"{media.path.name}: collection identifier {value}")
            return value
        return None

"""
Classification of source files into media kinds.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from .constants import MediaKind, get_logger
from .readers import MetadataReader, default_readers


@dataclass
class ClassifiedFile:
    """A source file bound to the reader and container handle that recognized it."""
    path: Path
    kind: MediaKind
    reader: MetadataReader
    handle: Any

    def read_date_field(self) -> Optional[Any]:
        return self.reader.read_date_field(self.handle)

    def read_collection_identifier(self) -> Optional[Any]:
        return self.reader.read_collection_identifier(self.handle)


class MediaClassifier:
    """Try each media kind's reader in priority order.

    Video containers are probed before photos: some photo probes accept
    the bytes of a video wrapper, while the video probe rejects still images.
    """

    def __init__(self, readers: Optional[Sequence[Tuple[MediaKind, MetadataReader]]] = None):
        self.readers: List[Tuple[MediaKind, MetadataReader]] = \
            list(readers) if readers is not None else default_readers()
        self.logger = get_logger()

    def classify(self, path: Path) -> Optional[ClassifiedFile]:
        """Return the first matching classification, or None if unsupported.

        Only regular files are offered to the readers. Folders and symbolic
        links are unsupported whatever they point at.
        """
        if path.is_symlink() or not path.is_file():
            self.logger.debug(f"{path.name}: not a regular file")
            return None

        for kind, reader in self.readers:
            handle = reader.open_container(path)
            if handle is not None:
                self.logger.debug(f"{path.name}: recognized as {kind.value}")
                return ClassifiedFile(path=path, kind=kind, reader=reader, handle=handle)
        return None

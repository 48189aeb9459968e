"""
Metadata readers for photo and video containers.

Each reader opens a file as a container of one media kind and returns a
handle holding the parsed metadata, or None when the container is not
recognized. The sorter only talks to readers through `open_container`,
`read_date_field` and `read_collection_identifier`; container parsing is
left to exiftool, ffprobe or Pillow.
"""

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from PIL import Image, UnidentifiedImageError

from . import constants
from .constants import (APPLE_CONTENT_ID_INDEX, EXIF_DATE_ORIGINAL, IMAGE_DEMUXERS,
                        QUICKTIME_CONTENT_ID_KEY, QUICKTIME_DATE_KEYS, MediaKind, get_logger)


logger = get_logger("mediasort.readers")

# EXIF sub-IFD pointer and the DateTimeOriginal tag within it
EXIF_IFD_POINTER = 0x8769
EXIF_TAG_DATE_ORIGINAL = 0x9003


@dataclass
class PhotoMetadata:
    """Parsed photo container: EXIF fields and Apple maker-note entries."""
    exif: Dict[str, Any] = field(default_factory=dict)
    maker_notes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VideoMetadata:
    """Parsed video container: format-level tags and media streams."""
    tags: Dict[str, Any] = field(default_factory=dict)
    streams: List[Dict[str, Any]] = field(default_factory=list)


class MetadataReader(Protocol):
    """Capability for reading embedded metadata from one media kind."""

    kind: MediaKind

    def open_container(self, path: Path) -> Optional[Any]:
        ...

    def read_date_field(self, handle: Any) -> Optional[Any]:
        ...

    def read_collection_identifier(self, handle: Any) -> Optional[Any]:
        ...


class PhotoReader:
    """Field access shared by all photo readers."""

    kind = MediaKind.PHOTO

    def open_container(self, path: Path) -> Optional[PhotoMetadata]:
        raise NotImplementedError

    def read_date_field(self, handle: PhotoMetadata) -> Optional[Any]:
        return handle.exif.get(EXIF_DATE_ORIGINAL)

    def read_collection_identifier(self, handle: PhotoMetadata) -> Optional[Any]:
        return handle.maker_notes.get(APPLE_CONTENT_ID_INDEX)


class ExifToolPhotoReader(PhotoReader):
    """Read photo metadata by calling exiftool."""

    def open_container(self, path: Path) -> Optional[PhotoMetadata]:
        try:
            result = subprocess.run([
                "exiftool",
                "-q",
                "-json",
                "-MIMEType",
                f"-{EXIF_DATE_ORIGINAL}",
                "-ContentIdentifier",
                str(path)],
                capture_output=True, text=True, check=True
            )
            data = json.loads(result.stdout)[0]
        except subprocess.CalledProcessError as e:
            logger.debug(f"exiftool failed for {path}: {e}")
            return None
        except (json.JSONDecodeError, IndexError) as e:
            logger.debug(f"Failed to parse exiftool JSON output for {path}: {e}")
            return None

        # Only image containers count as photos; exiftool also reads videos
        mime_type = data.get("MIMEType")
        if not isinstance(mime_type, str) or not mime_type.startswith("image/"):
            return None

        metadata = PhotoMetadata()
        if EXIF_DATE_ORIGINAL in data:
            metadata.exif[EXIF_DATE_ORIGINAL] = data[EXIF_DATE_ORIGINAL]

        # exiftool names Apple maker-note entry 17 "ContentIdentifier"
        if "ContentIdentifier" in data:
            metadata.maker_notes[APPLE_CONTENT_ID_INDEX] = data["ContentIdentifier"]

        return metadata


class PillowPhotoReader(PhotoReader):
    """Read photo metadata with Pillow when exiftool is unavailable.

    Pillow cannot decode vendor maker notes, so this reader never yields
    a collection identifier.
    """

    def open_container(self, path: Path) -> Optional[PhotoMetadata]:
        try:
            with Image.open(path) as image:
                exif = image.getexif()
                date_original = exif.get_ifd(EXIF_IFD_POINTER).get(EXIF_TAG_DATE_ORIGINAL)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.debug(f"Pillow could not open {path}: {e}")
            return None

        metadata = PhotoMetadata()
        if date_original is not None:
            metadata.exif[EXIF_DATE_ORIGINAL] = date_original
        return metadata


class FFProbeVideoReader:
    """Read video metadata by calling ffprobe."""

    kind = MediaKind.VIDEO

    def open_container(self, path: Path) -> Optional[VideoMetadata]:
        try:
            result = subprocess.run([
                "ffprobe", "-v", "quiet",
                "-print_format", "json",
                "-show_format",
                "-show_streams",
                str(path)
            ], capture_output=True, text=True, check=True)
            data = json.loads(result.stdout)
        except subprocess.CalledProcessError as e:
            logger.debug(f"ffprobe failed for {path}: {e}")
            return None
        except json.JSONDecodeError as e:
            logger.debug(f"Failed to parse ffprobe JSON output for {path}: {e}")
            return None

        fmt = data.get("format", {})
        if self._is_still_image(fmt.get("format_name", "")):
            return None

        # A container without any media track is not a usable video
        streams = data.get("streams") or []
        if not streams:
            logger.debug(f"No media streams found in {path}")
            return None

        return VideoMetadata(tags=fmt.get("tags") or {}, streams=streams)

    @staticmethod
    def _is_still_image(format_name: str) -> bool:
        for name in format_name.split(","):
            if name in IMAGE_DEMUXERS or name.endswith("_pipe"):
                return True
        return False

    def read_date_field(self, handle: VideoMetadata) -> Optional[Any]:
        for date_key in QUICKTIME_DATE_KEYS:
            value = handle.tags.get(date_key)
            if value:
                return value
        return None

    def read_collection_identifier(self, handle: VideoMetadata) -> Optional[Any]:
        return handle.tags.get(QUICKTIME_CONTENT_ID_KEY)


def default_readers() -> List[Tuple[MediaKind, MetadataReader]]:
    """Build readers for the tools available on this host, videos first."""
    readers: List[Tuple[MediaKind, MetadataReader]] = []

    if constants.check_tool_availability("ffprobe", "-version"):
        readers.append((MediaKind.VIDEO, FFProbeVideoReader()))
    else:
        logger.warning("ffprobe not found; video files will be skipped")

    if constants.check_tool_availability("exiftool", "-ver"):
        readers.append((MediaKind.PHOTO, ExifToolPhotoReader()))
    else:
        logger.debug("exiftool not found; reading photo metadata with Pillow")
        readers.append((MediaKind.PHOTO, PillowPhotoReader()))

    return readers

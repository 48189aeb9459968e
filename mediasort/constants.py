"""
Program-wide constants, shared console/logger access and tool probing.
"""

import logging
import subprocess
from enum import Enum
from typing import Optional

from rich.console import Console


PROGRAM = "mediasort"

# Destination folder for media without any usable creation date
UNSORTED_FOLDER = "Unsorted"

# Identifier used when a file's content cannot be hashed
SENTINEL_UUID = "00000000-0000-0000-0000-000000000000"

# Content hashing reads media in fixed-size chunks
HASH_CHUNK_SIZE = 512 * 1024

# Well-known metadata keys
EXIF_DATE_ORIGINAL = "DateTimeOriginal"
APPLE_CONTENT_ID_INDEX = "17"
QUICKTIME_CONTENT_ID_KEY = "com.apple.quicktime.content.identifier"
QUICKTIME_DATE_KEYS = ("com.apple.quicktime.creationdate", "creation_time")

# ffprobe demuxers that wrap still images rather than timed media
IMAGE_DEMUXERS = ("image2", "gif", "apng", "webp", "ico", "bmp")


class MediaKind(Enum):
    """Closed set of media kinds the sorter recognizes."""
    PHOTO = "photo"
    VIDEO = "video"


_console: Optional[Console] = None


def get_console() -> Console:
    """Return the shared rich console."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def get_logger(name: str = PROGRAM) -> logging.Logger:
    """Return the program logger, or one of its children."""
    return logging.getLogger(name)


def check_tool_availability(cmd: str, version_flag: str = "-h") -> bool:
    """Check whether an external command-line tool can be executed."""
    try:
        subprocess.run([cmd, version_flag], capture_output=True, check=True)
        return True
    except (FileNotFoundError, PermissionError, subprocess.CalledProcessError):
        return False

"""Creation-date parsing and resolution for classified media."""

import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from .classifier import ClassifiedFile
from .constants import get_logger


logger = get_logger()

# Accepts EXIF (2024:07:04 10:15:30) and ISO 8601 (2024-07-04T10:15:30Z)
# date-time strings. Anything after the seconds (fraction, zone) is ignored.
DATE_PATTERN = re.compile(
    r'(\d{4})[-:](\d{2})[-:](\d{2})'
    r'(?:[T\s]+(\d{2})[-:](\d{2})[-:](\d{2}))?'
)


@dataclass(frozen=True)
class DateComponents:
    """Calendar date/time fields, any of which may be unknown.

    Values are not validated as calendar dates. Missing fields are only
    defaulted to zero when formatted.
    """
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    hour: Optional[int] = None
    minute: Optional[int] = None
    second: Optional[int] = None

    @classmethod
    def from_datetime(cls, dt: datetime) -> "DateComponents":
        return cls(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second)

    def formatted(self, name: str) -> int:
        """Return the named field, defaulting to 0 when unknown."""
        value = getattr(self, name)
        return value if value is not None else 0


def parse_metadata_date(value: Any) -> Optional[DateComponents]:
    """Parse an embedded metadata date string into its literal fields.

    The wall-clock fields are taken as written; no timezone conversion is
    applied and out-of-range values such as month 13 are kept.
    """
    if not isinstance(value, str):
        return None

    match = DATE_PATTERN.match(value.strip())
    if not match:
        return None

    fields = [int(group) if group is not None else None for group in match.groups()]
    return DateComponents(*fields)


def file_creation_timestamp(path: Path) -> float:
    """Return the filesystem creation time, or the modification time where
    the platform does not record one."""
    stat = os.stat(path)
    return getattr(stat, "st_birthtime", stat.st_mtime)


def get_file_creation_date(path: Path) -> Optional[DateComponents]:
    """Filesystem creation time as calendar fields in the local timezone."""
    try:
        timestamp = file_creation_timestamp(path)
    except OSError as e:
        logger.debug(f"Could not stat {path}: {e}")
        return None
    return DateComponents.from_datetime(datetime.fromtimestamp(timestamp))


class CreationDateResolver:
    """Resolve a creation date from embedded metadata, then the filesystem."""

    def __init__(self, use_file_creation_time: bool = True):
        self.use_file_creation_time = use_file_creation_time

    def resolve(self, media: ClassifiedFile) -> Optional[DateComponents]:
        embedded = media.read_date_field()
        creation_date = parse_metadata_date(embedded)
        if creation_date:
            logger.debug(f"{media.path.name}: embedded creation date {embedded!r}")
            return creation_date

        if self.use_file_creation_time:
            creation_date = get_file_creation_date(media.path)
            if creation_date:
                logger.debug(f"{media.path.name}: using filesystem creation time")
                return creation_date

        return None

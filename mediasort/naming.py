"""
Destination folder and filename synthesis.
"""

from pathlib import Path
from typing import Optional

from .constants import UNSORTED_FOLDER
from .timestamps import DateComponents


def destination_subpath(creation_date: Optional[DateComponents]) -> str:
    """Return "YYYY/MM" for dated media, or the Unsorted folder name."""
    if creation_date is None:
        return UNSORTED_FOLDER

    year = creation_date.formatted("year")
    month = creation_date.formatted("month")
    return f"{year:04d}/{month:02d}"


def final_filename(original_path: Path, creation_date: Optional[DateComponents],
                   identifier: str) -> str:
    """Build "YYYY-MM-DD-HH-MM-SS-<identifier>.<ext>" for dated media.

    Undated media keep their original filename, since it is the only
    distinguishing information left.
    """
    if creation_date is None:
        return original_path.name

    fields = [creation_date.formatted(name)
              for name in ("year", "month", "day", "hour", "minute", "second")]
    stamp = f"{fields[0]:04d}-" + "-".join(f"{value:02d}" for value in fields[1:])

    ext = original_path.suffix.lower()
    return f"{stamp}-{identifier}{ext}"

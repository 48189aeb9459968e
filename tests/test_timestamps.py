"""
Test creation-date parsing and the date fallback chain.
"""

import os
from datetime import datetime

import pytest

from mediasort.classifier import MediaClassifier
from mediasort.constants import MediaKind
from mediasort.timestamps import (CreationDateResolver, DateComponents, file_creation_timestamp,
                                  parse_metadata_date)

from conftest import fake_media


class TestParseMetadataDate:
    """Test the tolerant embedded date parser."""

    def test_exif_format(self):
        assert parse_metadata_date("2024:07:04 10:15:30") == DateComponents(2024, 7, 4, 10, 15, 30)

    def test_iso8601_with_zone_is_not_converted(self):
        """Wall-clock fields are kept as written; the zone suffix is ignored."""
        parsed = parse_metadata_date("2024-07-04T23:15:30-0400")
        assert parsed == DateComponents(2024, 7, 4, 23, 15, 30)

    def test_fractional_seconds_and_utc_marker(self):
        parsed = parse_metadata_date("2023-12-31T08:00:01.000000Z")
        assert parsed == DateComponents(2023, 12, 31, 8, 0, 1)

    def test_mixed_separators(self):
        assert parse_metadata_date("2021-03:09 07-08:09") == DateComponents(2021, 3, 9, 7, 8, 9)

    def test_date_only_leaves_time_unknown(self):
        parsed = parse_metadata_date("2020:02:29")
        assert parsed == DateComponents(2020, 2, 29, None, None, None)
        assert parsed.hour is None
        assert parsed.formatted("hour") == 0

    def test_invalid_calendar_values_are_kept(self):
        """Month 13 is accepted as-is rather than rejected."""
        assert parse_metadata_date("2024:13:45 25:61:61") == DateComponents(2024, 13, 45, 25, 61, 61)

    @pytest.mark.parametrize("value", [None, "", "not a date", "24:07:04 10:15:30", 20240704, b"2024:07:04"])
    def test_unparsable_values(self, value):
        assert parse_metadata_date(value) is None


class TestCreationDateResolver:
    """Test the embedded date -> filesystem time -> none fallback chain."""

    def _classify(self, fake_readers, path):
        media = MediaClassifier(fake_readers).classify(path)
        assert media is not None
        return media

    def test_embedded_date_wins_over_file_time(self, fake_readers, tmp_path):
        path = tmp_path / "clip.mov"
        path.write_bytes(fake_media(MediaKind.VIDEO, date="2019:05:06 07:08:09"))
        os.utime(path, (0, 0))

        resolved = CreationDateResolver(True).resolve(self._classify(fake_readers, path))
        assert resolved == DateComponents(2019, 5, 6, 7, 8, 9)

    def test_file_time_fallback_in_local_time(self, fake_readers, tmp_path):
        path = tmp_path / "photo.jpg"
        path.write_bytes(fake_media(MediaKind.PHOTO))
        stamp = datetime(2022, 11, 3, 14, 5, 6).timestamp()
        os.utime(path, (stamp, stamp))

        resolved = CreationDateResolver(True).resolve(self._classify(fake_readers, path))
        expected = datetime.fromtimestamp(file_creation_timestamp(path))
        assert resolved == DateComponents.from_datetime(expected)

    def test_unparsable_embedded_date_falls_back(self, fake_readers, tmp_path):
        path = tmp_path / "photo.jpg"
        path.write_bytes(fake_media(MediaKind.PHOTO, date="0000"))

        resolved = CreationDateResolver(True).resolve(self._classify(fake_readers, path))
        assert resolved is not None
        assert resolved.year == datetime.fromtimestamp(file_creation_timestamp(path)).year

    def test_no_date_without_fallback(self, fake_readers, tmp_path):
        path = tmp_path / "photo.jpg"
        path.write_bytes(fake_media(MediaKind.PHOTO))

        assert CreationDateResolver(False).resolve(self._classify(fake_readers, path)) is None

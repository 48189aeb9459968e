"""
pytest configuration and fixtures for mediasort tests.
"""

import io
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from mediasort.classifier import MediaClassifier
from mediasort.constants import MediaKind
from mediasort.core import MediaSorter


PHOTO_MAGIC = b"FAKEPHOTO"
VIDEO_MAGIC = b"FAKEVIDEO"


@dataclass
class CliResult:
    """Result from running CLI command."""
    exit_code: int
    output: str
    error: str


def fake_media(kind: MediaKind, date: Optional[str] = None,
               content_id: Optional[Any] = None, payload: str = "") -> bytes:
    """Build file content understood by the fake readers.

    Metadata travels inside the file bytes, so it follows the file when it
    is moved and identical metadata plus payload means identical bytes.
    """
    magic = VIDEO_MAGIC if kind is MediaKind.VIDEO else PHOTO_MAGIC
    meta = {"date": date, "id": content_id, "payload": payload}
    return magic + json.dumps(meta, sort_keys=True).encode("utf-8")


class FakeReader:
    """Metadata reader that understands fake_media() files."""

    def __init__(self, kind: MediaKind, accepts: tuple):
        self.kind = kind
        self.accepts = accepts
        self.opened: List[str] = []

    def open_container(self, path: Path) -> Optional[Dict[str, Any]]:
        self.opened.append(path.name)
        try:
            data = path.read_bytes()
        except OSError:
            return None
        for magic in self.accepts:
            if data.startswith(magic):
                return json.loads(data[len(magic):].decode("utf-8"))
        return None

    def read_date_field(self, handle: Dict[str, Any]) -> Optional[Any]:
        return handle.get("date")

    def read_collection_identifier(self, handle: Dict[str, Any]) -> Optional[Any]:
        return handle.get("id")


@pytest.fixture
def fake_readers():
    """Video-first reader list; the photo probe also accepts video bytes."""
    return [
        (MediaKind.VIDEO, FakeReader(MediaKind.VIDEO, (VIDEO_MAGIC,))),
        (MediaKind.PHOTO, FakeReader(MediaKind.PHOTO, (PHOTO_MAGIC, VIDEO_MAGIC))),
    ]


@pytest.fixture
def make_sorter(fake_readers):
    """Create a MediaSorter wired to the fake readers."""

    def create(**kwargs) -> MediaSorter:
        kwargs.setdefault("classifier", MediaClassifier(fake_readers))
        kwargs.setdefault("max_workers", 4)
        return MediaSorter(**kwargs)

    return create


@pytest.fixture
def source_dir(tmp_path):
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path):
    return tmp_path / "dest"


@pytest.fixture
def create_test_files(source_dir):
    """Helper to create test files with specific properties."""

    def create_files(file_specs: List[dict]) -> Path:
        """Create test files based on specifications.

        Args:
            file_specs: List of dicts with keys:
                - name: filename
                - content: file content (optional)
                - mtime: modification time as datetime (optional)

        Returns:
            Path to directory containing created files
        """
        for spec in file_specs:
            file_path = source_dir / spec['name']

            content = spec.get('content', b'test file content')
            if isinstance(content, str):
                file_path.write_text(content)
            else:
                file_path.write_bytes(content)

            if 'mtime' in spec:
                import os
                mtime = spec['mtime'].timestamp()
                os.utime(file_path, (mtime, mtime))

        return source_dir

    return create_files


@pytest.fixture
def assert_file_structure():
    """Helper to assert expected file structure."""

    def check_structure(base_path: Path, expected_structure: dict):
        """Assert that directory has expected structure.

        Args:
            base_path: Root directory to check
            expected_structure: Dict describing expected structure
                e.g., {
                    "2024": {
                        "01": ["file1.jpg", "file2.jpg"],
                    },
                    "Unsorted": ["IMG_0001.JPG"]
                }
        """
        def check_level(path: Path, structure: dict):
            for name, value in structure.items():
                item_path = path / name
                assert item_path.exists(), f"Expected {item_path} to exist"
                assert item_path.is_dir(), f"Expected {item_path} to be a directory"

                if isinstance(value, dict):
                    check_level(item_path, value)
                else:
                    actual_files = sorted(f.name for f in item_path.iterdir() if f.is_file())
                    assert actual_files == sorted(value), \
                        f"Expected files {sorted(value)} in {item_path}, got {actual_files}"

        check_level(base_path, expected_structure)

    return check_structure


@pytest.fixture
def test_config_path(tmp_path):
    """Isolated config path for each test."""
    return tmp_path / "config" / "config.yml"


@pytest.fixture
def cli_runner(monkeypatch, fake_readers):
    """Create a CLI runner that captures output, uses fake readers and a test config."""
    monkeypatch.setattr("mediasort.classifier.default_readers", lambda: fake_readers)

    def run_cli(*args, config_path=None, answer="n"):
        """Run mediasort CLI with given arguments.

        Args:
            *args: Command line arguments (source, dest, --flags, etc)
            config_path: Optional config path for test isolation
            answer: Reply given to the confirmation prompt

        Returns:
            CliResult with exit_code, output, and error
        """
        from mediasort.cli import main
        from mediasort.constants import get_console

        stdout = io.StringIO()
        stderr = io.StringIO()
        console = get_console()
        monkeypatch.setattr(sys, "stdout", stdout)
        monkeypatch.setattr(sys, "stderr", stderr)
        monkeypatch.setattr(sys, "argv", ["mediasort"] + [str(a) for a in args])
        monkeypatch.setattr(console, "input", lambda prompt="": answer)

        try:
            exit_code = main(config_path=config_path)
        except SystemExit as e:
            exit_code = e.code if e.code is not None else 0
        finally:
            logger = logging.getLogger("mediasort")
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

        return CliResult(
            exit_code=exit_code,
            output=stdout.getvalue(),
            error=stderr.getvalue()
        )

    return run_cli


@pytest.fixture
def mock_external_tools(monkeypatch):
    """Mock external tool availability for testing."""

    def mock_tools(tools_available: dict):
        """Mock specific tools as available or not.

        Args:
            tools_available: Dict of tool_name -> bool
                e.g., {"exiftool": False, "ffprobe": True}
        """
        def mock_check_tool(cmd: str, version_flag: str = "-h") -> bool:
            return tools_available.get(cmd, False)

        monkeypatch.setattr("mediasort.constants.check_tool_availability", mock_check_tool)

    return mock_tools


@pytest.fixture
def jpeg_with_exif():
    """Write a real JPEG, optionally with an EXIF DateTimeOriginal."""
    from PIL import Image

    def create(path: Path, date_original: Optional[str] = None,
               color=(200, 30, 30)) -> Path:
        image = Image.new("RGB", (16, 16), color)
        exif = Image.Exif()
        if date_original:
            exif[0x8769] = {0x9003: date_original}
        image.save(path, "JPEG", exif=exif)
        return path

    return create

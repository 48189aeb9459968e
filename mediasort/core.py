"""
Core media sorting functionality.
"""

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from .classifier import MediaClassifier
from .constants import get_logger
from .file_operations import FileOperations, MoveResult
from .identity import IdentityResolver
from .naming import destination_subpath, final_filename
from .progress import ProgressContext
from .stats import SortCounters, SortSummary
from .timestamps import CreationDateResolver


class MediaSorterError(Exception):
    """Base error for the media sorter."""


class ConfigurationError(MediaSorterError):
    """Source or destination cannot be used; no files were touched."""


class SortState(Enum):
    """Stages of a single sort run."""
    IDLE = "idle"
    VALIDATING = "validating"
    SCANNING = "scanning"
    PROCESSING = "processing"
    JOINED = "joined"
    DONE = "done"


class MediaSorter:
    """Sort every file in a source folder into a dated destination tree.

    Each file is processed by its own task on a bounded thread pool. Tasks
    share only the destination tree, whose directory creation is serialized
    by FileOperations, and the counters, which carry their own lock.
    """

    def __init__(self, counters: Optional[SortCounters] = None,
                 classifier: Optional[MediaClassifier] = None,
                 date_resolver: Optional[CreationDateResolver] = None,
                 identity_resolver: Optional[IdentityResolver] = None,
                 file_ops: Optional[FileOperations] = None,
                 max_workers: Optional[int] = None,
                 use_file_creation_time: bool = True):
        self.counters = counters or SortCounters()
        self.classifier = classifier or MediaClassifier()
        self.date_resolver = date_resolver or CreationDateResolver(use_file_creation_time)
        self.identity_resolver = identity_resolver or IdentityResolver()
        self.file_ops = file_ops or FileOperations()
        self.max_workers = max_workers or os.cpu_count() or 1
        self.state = SortState.IDLE
        self.logger = get_logger()

    def sort(self, source: Union[str, Path], dest: Union[str, Path],
             cancel_event: Optional[threading.Event] = None,
             progress_ctx: Optional[ProgressContext] = None) -> SortSummary:
        """Move every supported file from source into dest.

        Raises ConfigurationError before touching any file if source is not a
        folder or dest is neither a folder nor creatable. Returns once every
        dispatched task has finished.
        """
        cancel_event = cancel_event or threading.Event()
        progress_ctx = progress_ctx or ProgressContext()

        self.state = SortState.VALIDATING
        source_dir, dest_dir = self._validate(source, dest)

        self.state = SortState.SCANNING
        try:
            entries = self.find_source_files(source_dir)
        except OSError as e:
            self.state = SortState.IDLE
            raise ConfigurationError(f"Could not list source folder {source_dir}: {e}") from e
        progress_ctx.set_total(len(entries))
        self.logger.debug(f"Found {len(entries)} entries in {source_dir}")

        self.state = SortState.PROCESSING
        futures: List[Future] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            try:
                for file_path in entries:
                    if cancel_event.is_set():
                        break
                    futures.append(executor.submit(
                        self._run_task, file_path, dest_dir, cancel_event, progress_ctx))

                for _ in as_completed(futures):
                    pass
            except KeyboardInterrupt:
                self.logger.warning("Cancelling: waiting for files in progress to finish")
                cancel_event.set()
                for future in futures:
                    future.cancel()

        self.state = SortState.JOINED
        summary = self.counters.snapshot(cancelled=cancel_event.is_set())
        self.state = SortState.DONE
        return summary

    def _validate(self, source: Union[str, Path], dest: Union[str, Path]):
        source_dir = Path(source).expanduser().absolute()
        dest_dir = Path(dest).expanduser().absolute()

        if not source_dir.is_dir():
            self.state = SortState.IDLE
            raise ConfigurationError(
                f"Source path must point to a valid folder on disk: {source_dir}")

        error = FileOperations.validate_directory(dest_dir, create=True)
        if error:
            self.state = SortState.IDLE
            raise ConfigurationError(
                f"Destination path must point to a valid folder on disk. {error}")

        return source_dir, dest_dir

    @staticmethod
    def find_source_files(source: Path) -> List[Path]:
        """List source entries non-recursively, skipping hidden names."""
        return sorted(entry for entry in source.iterdir() if not entry.name.startswith("."))

    def _run_task(self, file_path: Path, dest_dir: Path, cancel_event: threading.Event,
                  progress_ctx: ProgressContext) -> None:
        """Task boundary: per-file errors never escape into the pool."""
        if cancel_event.is_set():
            return

        try:
            self.sort_media(file_path, dest_dir)
        except Exception as e:
            self.logger.error(f"{file_path.name}:\tError processing file: {e}")
            self.counters.increment_failures()

        progress_ctx.advance(f"Sorted: {file_path.name}")

    def sort_media(self, file_path: Path, dest_dir: Path) -> None:
        """Classify, date, name and relocate a single source file."""
        file_name = file_path.name

        media = self.classifier.classify(file_path)
        if media is None:
            self.logger.info(f"{file_name}: Not a supported media file. Skipping.")
            self.counters.increment_unsupported()
            return

        creation_date = self.date_resolver.resolve(media)
        subpath = destination_subpath(creation_date)
        target_dir = dest_dir / subpath
        self.file_ops.ensure_directory(target_dir)

        identifier = self.identity_resolver.resolve(media)
        target_name = final_filename(file_path, creation_date, identifier)
        preview = f"{subpath}/{target_name}"

        try:
            result = self.file_ops.move_file(file_path, target_dir / target_name)
        except OSError as e:
            self.logger.error(f"{file_name}:\tMove failed. {e}")
            self.counters.increment_failures()
            return

        if result is MoveResult.EXISTS:
            self.logger.warning(f"{file_name}:\tMove failed. File already exists: {preview}")
            self.counters.increment_collisions()
            return

        self.counters.record_relocated(media.kind)
        self.logger.info(f"{file_name}:\tMoved to {preview}")

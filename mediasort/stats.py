"""
Statistics tracking for concurrent sort runs.
"""

import threading
from dataclasses import dataclass

from .constants import MediaKind


@dataclass(frozen=True)
class SortSummary:
    """Snapshot of a finished (or cancelled) sort run."""
    photo_count: int = 0
    video_count: int = 0
    unsupported_count: int = 0
    collision_count: int = 0
    failure_count: int = 0
    cancelled: bool = False

    @property
    def total(self) -> int:
        """Number of files relocated."""
        return self.photo_count + self.video_count

    def as_tuple(self):
        return self.photo_count, self.video_count


class SortCounters:
    """Aggregate counters shared by worker threads.

    Every update happens under one lock that guards nothing else. Reads are
    only meaningful once all workers have finished.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._stats = {
            'photos': 0,
            'videos': 0,
            'unsupported': 0,
            'collisions': 0,
            'failures': 0,
        }

    def record_relocated(self, kind: MediaKind) -> None:
        """Count a file successfully moved into the destination tree."""
        key = 'videos' if kind is MediaKind.VIDEO else 'photos'
        with self._lock:
            self._stats[key] += 1

    def increment_unsupported(self) -> None:
        with self._lock:
            self._stats['unsupported'] += 1

    def increment_collisions(self) -> None:
        with self._lock:
            self._stats['collisions'] += 1

    def increment_failures(self) -> None:
        with self._lock:
            self._stats['failures'] += 1

    def snapshot(self, cancelled: bool = False) -> SortSummary:
        """Copy the current counts into an immutable summary."""
        with self._lock:
            return SortSummary(
                photo_count=self._stats['photos'],
                video_count=self._stats['videos'],
                unsupported_count=self._stats['unsupported'],
                collision_count=self._stats['collisions'],
                failure_count=self._stats['failures'],
                cancelled=cancelled,
            )

"""Progress tracking context shared with sort workers."""

from typing import Optional
from rich.progress import Progress, TaskID


class ProgressContext:
    """Wraps a rich progress task so workers can report without owning it."""

    def __init__(self, progress: Optional[Progress] = None, task: Optional[TaskID] = None):
        self.progress = progress
        self.task = task

    @property
    def is_active(self) -> bool:
        """Check if progress tracking is active."""
        return self.progress is not None and self.task is not None

    def set_total(self, total: int) -> None:
        """Set the number of files once the source has been scanned."""
        if self.is_active:
            self.progress.update(self.task, total=total)

    def advance(self, description: Optional[str] = None) -> None:
        """Mark one file as finished, optionally naming it."""
        if self.is_active:
            if description:
                self.progress.update(self.task, description=description)
            self.progress.advance(self.task, 1)

# src/task_tracker/tasks/errors.py

from __future__ import annotations


class TaskTrackerError(Exception):
    """Base class for every error raised by the task core."""


class InvalidArgument(TaskTrackerError, ValueError):
    """Absent entity, bad field value, or a broken epic link."""


class NotFound(TaskTrackerError, LookupError):
    """An update/operation named an identifier that does not exist."""

    def __init__(self, message: str, *, item_id: int | None = None) -> None:
        super().__init__(message)
        self.item_id = item_id


class SchedulingConflict(TaskTrackerError):
    """A create/update would overlap an already scheduled item."""

    def __init__(self, message: str, *, conflict_id: int | None = None) -> None:
        super().__init__(message)
        self.conflict_id = conflict_id


class ValidationError(TaskTrackerError, ValueError):
    """Restored data is structurally impossible (duplicate ids, dangling epic refs, bad records)."""


class PersistenceError(TaskTrackerError, RuntimeError):
    """Reading or writing the backing file failed."""

# src/task_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import StrEnum
from typing import ClassVar

from .errors import InvalidArgument


class TaskStatus(StrEnum):
    """Lifecycle status shared by all work items."""

    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw or not raw.strip():
            return cls.NEW
        try:
            return cls(raw.strip().upper())
        except ValueError:
            raise ValueError(f"unknown status: {raw!r}") from None


class TaskKind(StrEnum):
    TASK = "TASK"
    EPIC = "EPIC"
    SUBTASK = "SUBTASK"


def to_local_naive(value: datetime | None) -> datetime | None:
    """Schedules compare naive local times; aware values are converted, not rejected."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


@dataclass(slots=True, eq=False)
class WorkItem:
    """
    Base fields shared by tasks, epics and subtasks.

    Notes:
    - id == 0 means "not assigned yet"; the store hands out real ids.
    - start_time is always naive local time (see to_local_naive).
    - end_time is derived (start + duration) and absent unless both are set.
    - equality is (kind, id) only: two snapshots of the same item compare equal.
    """

    kind: ClassVar[TaskKind]

    name: str
    description: str = ""
    status: TaskStatus = TaskStatus.NEW
    duration: timedelta | None = None
    start_time: datetime | None = None
    id: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidArgument("name must be non-empty text")
        if self.description is None:
            self.description = ""
        try:
            self.status = TaskStatus(self.status)
        except ValueError:
            raise InvalidArgument(f"unknown status: {self.status!r}") from None
        if self.duration is not None and self.duration < timedelta(0):
            raise InvalidArgument("duration must not be negative")
        self.start_time = to_local_naive(self.start_time)

    @property
    def end_time(self) -> datetime | None:
        if self.start_time is None or self.duration is None:
            return None
        return self.start_time + self.duration

    @property
    def is_scheduled(self) -> bool:
        return self.start_time is not None

    def clone(self) -> WorkItem:
        return replace(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorkItem):
            return NotImplemented
        return self.kind == other.kind and self.id == other.id

    def __hash__(self) -> int:
        return hash((self.kind, self.id))


@dataclass(slots=True, eq=False)
class Task(WorkItem):
    kind: ClassVar[TaskKind] = TaskKind.TASK


@dataclass(slots=True, eq=False)
class Epic(WorkItem):
    """
    Container of subtasks.

    status/start_time/duration/end_time are owned by the rollup; whatever a
    caller puts there is overwritten on the next recomputation.
    """

    kind: ClassVar[TaskKind] = TaskKind.EPIC

    subtask_ids: list[int] = field(default_factory=list)
    rolled_end_time: datetime | None = None

    @property
    def end_time(self) -> datetime | None:
        return self.rolled_end_time

    def add_subtask_id(self, subtask_id: int) -> None:
        if subtask_id <= 0:
            raise InvalidArgument(f"subtask id must be positive, got {subtask_id}")
        if subtask_id not in self.subtask_ids:
            self.subtask_ids.append(subtask_id)

    def remove_subtask_id(self, subtask_id: int) -> None:
        if subtask_id in self.subtask_ids:
            self.subtask_ids.remove(subtask_id)

    def clone(self) -> Epic:
        return replace(self, subtask_ids=list(self.subtask_ids))


@dataclass(slots=True, eq=False)
class Subtask(WorkItem):
    kind: ClassVar[TaskKind] = TaskKind.SUBTASK

    epic_id: int = 0


AnyItem = Task | Epic | Subtask

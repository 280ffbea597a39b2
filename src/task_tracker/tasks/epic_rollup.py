# src/task_tracker/tasks/epic_rollup.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from .task_models import Epic, Subtask, TaskStatus


@dataclass(slots=True, frozen=True)
class EpicRollup:
    status: TaskStatus
    start_time: datetime | None
    duration: timedelta | None
    end_time: datetime | None


EMPTY_ROLLUP = EpicRollup(status=TaskStatus.NEW, start_time=None, duration=None, end_time=None)


def rollup_status(subtasks: list[Subtask]) -> TaskStatus:
    """
    NEW if there are no subtasks or all are NEW, DONE if all are DONE,
    IN_PROGRESS for anything else.
    """
    if not subtasks:
        return TaskStatus.NEW
    statuses = {s.status for s in subtasks}
    if statuses == {TaskStatus.NEW}:
        return TaskStatus.NEW
    if statuses == {TaskStatus.DONE}:
        return TaskStatus.DONE
    return TaskStatus.IN_PROGRESS


def compute_rollup(subtasks: Iterable[Subtask]) -> EpicRollup:
    items = list(subtasks)
    if not items:
        return EMPTY_ROLLUP

    starts = [s.start_time for s in items if s.start_time is not None]
    ends = [e for e in (s.end_time for s in items) if e is not None]
    durations = [s.duration for s in items if s.duration is not None]

    return EpicRollup(
        status=rollup_status(items),
        start_time=min(starts) if starts else None,
        duration=sum(durations, timedelta(0)) if durations else None,
        end_time=max(ends) if ends else None,
    )


def apply_rollup(epic: Epic, subtasks: Iterable[Subtask]) -> EpicRollup:
    """Recompute and write the derived fields onto `epic`. Idempotent."""
    result = compute_rollup(subtasks)
    epic.status = result.status
    epic.start_time = result.start_time
    epic.duration = result.duration
    epic.rolled_end_time = result.end_time
    return result

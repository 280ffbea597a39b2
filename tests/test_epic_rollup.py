# tests/test_epic_rollup.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from task_tracker.tasks.epic_rollup import EMPTY_ROLLUP, apply_rollup, compute_rollup, rollup_status
from task_tracker.tasks.task_models import Epic, Subtask, TaskStatus

NEW, WIP, DONE = TaskStatus.NEW, TaskStatus.IN_PROGRESS, TaskStatus.DONE
T0 = datetime(2024, 5, 1, 9, 0)


def _sub(i: int, status: TaskStatus = NEW, start_h: int | None = None, dur_min: int | None = None) -> Subtask:
    return Subtask(
        name=f"s{i}",
        id=i,
        epic_id=100,
        status=status,
        start_time=None if start_h is None else T0.replace(hour=start_h),
        duration=None if dur_min is None else timedelta(minutes=dur_min),
    )


@pytest.mark.parametrize(
    ("statuses", "expected"),
    [
        ([], NEW),
        ([NEW], NEW),
        ([NEW, NEW], NEW),
        ([DONE], DONE),
        ([DONE, DONE], DONE),
        ([WIP], WIP),
        ([WIP, WIP], WIP),
        ([NEW, DONE], WIP),
        ([NEW, WIP], WIP),
        ([NEW, WIP, DONE], WIP),
    ],
)
def test_rollup_status(statuses, expected) -> None:
    subs = [_sub(i, s) for i, s in enumerate(statuses, start=1)]
    assert rollup_status(subs) is expected


def test_empty_epic_rollup() -> None:
    assert compute_rollup([]) == EMPTY_ROLLUP
    assert EMPTY_ROLLUP.start_time is None
    assert EMPTY_ROLLUP.duration is None
    assert EMPTY_ROLLUP.end_time is None


def test_subtasks_without_times_collapse_like_empty() -> None:
    result = compute_rollup([_sub(1), _sub(2, DONE)])
    assert result.start_time is None
    assert result.duration is None
    assert result.end_time is None


def test_time_window() -> None:
    subs = [
        _sub(1, start_h=13, dur_min=60),
        _sub(2, start_h=9, dur_min=30),
        _sub(3, dur_min=15),  # duration counts, no start
        _sub(4, start_h=11),  # start counts, no end
    ]
    result = compute_rollup(subs)
    assert result.start_time == T0.replace(hour=9)
    assert result.end_time == T0.replace(hour=14)
    assert result.duration == timedelta(minutes=105)


def test_apply_rollup_overwrites_caller_values_and_is_idempotent() -> None:
    epic = Epic(name="e", id=100, status=DONE, start_time=T0, duration=timedelta(hours=8))
    subs = [_sub(1, WIP, start_h=10, dur_min=30)]

    first = apply_rollup(epic, subs)
    snapshot = (epic.status, epic.start_time, epic.duration, epic.end_time)
    second = apply_rollup(epic, subs)

    assert first == second
    assert (epic.status, epic.start_time, epic.duration, epic.end_time) == snapshot
    assert epic.status is WIP
    assert epic.end_time == T0.replace(hour=10, minute=30)

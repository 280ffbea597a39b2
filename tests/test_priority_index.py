# tests/test_priority_index.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from task_tracker.tasks.priority_index import PriorityIndex, overlaps
from task_tracker.tasks.task_models import Subtask, Task

T0 = datetime(2024, 5, 1, 10, 0)


def _item(i: int, start_min: int | None, dur_min: int | None = None) -> Task:
    return Task(
        name=f"t{i}",
        id=i,
        start_time=None if start_min is None else T0 + timedelta(minutes=start_min),
        duration=None if dur_min is None else timedelta(minutes=dur_min),
    )


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        ((0, 30), (15, 30), True),  # partial
        ((0, 60), (10, 10), True),  # containment
        ((0, 30), (30, 30), False),  # back-to-back
        ((0, 30), (45, 30), False),  # gap
        ((0, None), (0, None), True),  # same instant
        ((0, 0), (0, 30), True),  # zero length at same start
        ((10, None), (0, 30), True),  # instant inside
        ((30, None), (0, 30), False),  # instant at the other's end
    ],
)
def test_overlap_rule(a, b, expected) -> None:
    x = _item(1, *a)
    y = _item(2, *b)
    assert overlaps(x, y) is expected
    assert overlaps(y, x) is expected


def test_unscheduled_never_overlaps() -> None:
    assert overlaps(_item(1, None, 30), _item(2, 0, 30)) is False
    assert overlaps(_item(1, None), _item(2, None)) is False


def test_ordered_by_start_then_id() -> None:
    idx = PriorityIndex()
    idx.upsert(_item(3, 60))
    idx.upsert(_item(1, 120))
    idx.upsert(_item(2, 60))
    idx.upsert(_item(4, None))

    assert [i.id for i in list(idx)] == [2, 3, 1]
    assert len(idx) == 3
    assert 4 not in idx


def test_upsert_replaces_by_id_after_time_change() -> None:
    idx = PriorityIndex()
    item = _item(1, 0, 30)
    idx.upsert(item)
    idx.upsert(_item(2, 60))

    # The stored object was mutated in place before re-upsert.
    item.start_time = T0 + timedelta(minutes=90)
    idx.upsert(item)

    assert [i.id for i in idx] == [2, 1]
    assert len(idx) == 2


def test_upsert_without_start_drops_entry() -> None:
    idx = PriorityIndex()
    idx.upsert(_item(1, 0))
    idx.upsert(_item(1, None))
    assert len(idx) == 0


def test_remove_unknown_is_no_op() -> None:
    idx = PriorityIndex()
    idx.upsert(_item(1, 0))
    idx.remove(42)
    idx.remove(1)
    idx.remove(1)
    assert list(idx) == []


def test_find_conflict_with_exclusion() -> None:
    idx = PriorityIndex()
    idx.upsert(_item(1, 0, 30))
    sub = Subtask(name="s", id=2, epic_id=9, start_time=T0 + timedelta(minutes=60))
    idx.upsert(sub)

    candidate = _item(1, 10, 10)
    assert idx.find_conflict(candidate, exclude_id=1) is None
    conflict = idx.find_conflict(candidate)
    assert conflict is not None and conflict.id == 1

    assert idx.find_conflict(_item(5, 60)) is sub
    assert idx.find_conflict(_item(5, None, 600)) is None


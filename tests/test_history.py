# tests/test_history.py

from __future__ import annotations

from task_tracker.tasks.history import HistoryTracker
from task_tracker.tasks.task_models import Epic, Task


def _task(i: int) -> Task:
    return Task(name=f"t{i}", id=i)


def test_record_appends_in_visit_order() -> None:
    h = HistoryTracker()
    for i in (1, 2, 3):
        h.record(_task(i))
    assert h.ids() == [1, 2, 3]
    assert [t.name for t in h.snapshot()] == ["t1", "t2", "t3"]


def test_record_none_is_ignored() -> None:
    h = HistoryTracker()
    h.record(None)
    assert len(h) == 0


def test_revisit_moves_to_tail_without_growing() -> None:
    h = HistoryTracker()
    for i in (1, 2, 3):
        h.record(_task(i))

    h.record(_task(1))  # head
    assert h.ids() == [2, 3, 1]
    h.record(_task(3))  # middle
    assert h.ids() == [2, 1, 3]
    h.record(_task(3))  # already tail
    assert h.ids() == [2, 1, 3]
    assert len(h) == 3


def test_forget_head_middle_tail() -> None:
    h = HistoryTracker()
    for i in range(1, 6):
        h.record(_task(i))

    h.forget(1)
    h.forget(3)
    h.forget(5)
    assert h.ids() == [2, 4]

    h.forget(99)  # unknown: no-op
    assert h.ids() == [2, 4]

    h.forget(2)
    h.forget(4)
    assert h.ids() == []
    assert len(h) == 0

    # Usable again after being emptied.
    h.record(_task(7))
    assert h.ids() == [7]


def test_items_of_different_kinds_share_one_sequence() -> None:
    h = HistoryTracker()
    h.record(_task(1))
    h.record(Epic(name="e", id=2))
    h.record(_task(1))
    assert h.ids() == [2, 1]


# src/task_tracker/tasks/priority_index.py

from __future__ import annotations

"""
Priority index.

Keeps every scheduled task/subtask (start_time set) ordered by
(start_time, id). Unscheduled items never enter the index.

Overlap rule:
- an item occupies [start, end); a missing duration means it occupies only
  the instant `start`,
- back-to-back items (one ends exactly when the next starts) do not overlap,
- two items starting at the same instant always overlap,
- items without a start time never overlap anything.
"""

import bisect
import logging
from collections.abc import Iterator
from datetime import datetime

from .task_models import WorkItem

logger = logging.getLogger(__name__)

_Key = tuple[datetime, int]


def _span(item: WorkItem) -> tuple[datetime, datetime]:
    start = item.start_time
    assert start is not None
    end = item.end_time
    return start, (end if end is not None else start)


def overlaps(a: WorkItem, b: WorkItem) -> bool:
    if a.start_time is None or b.start_time is None:
        return False
    a0, a1 = _span(a)
    b0, b1 = _span(b)
    if a0 == b0:
        return True
    return a0 < b1 and b0 < a1


class PriorityIndex:
    def __init__(self) -> None:
        self._keys: list[_Key] = []
        self._items: dict[int, WorkItem] = {}
        self._key_by_id: dict[int, _Key] = {}

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._key_by_id

    def __iter__(self) -> Iterator[WorkItem]:
        for _, item_id in self._keys:
            yield self._items[item_id]

    def upsert(self, item: WorkItem) -> None:
        """
        Insert `item` under its current start time.

        Any previous entry with the same id is removed first (its key was
        captured at insertion, so a changed start_time is handled).
        """
        self.remove(item.id)
        if item.start_time is None:
            return
        key: _Key = (item.start_time, item.id)
        bisect.insort(self._keys, key)
        self._items[item.id] = item
        self._key_by_id[item.id] = key

    def remove(self, item_id: int) -> None:
        key = self._key_by_id.pop(item_id, None)
        if key is None:
            return
        pos = bisect.bisect_left(self._keys, key)
        if pos < len(self._keys) and self._keys[pos] == key:
            del self._keys[pos]
        else:
            logger.error("PriorityIndex out of sync: key %s not found for id=%s", key, item_id)
        self._items.pop(item_id, None)

    def find_conflict(self, candidate: WorkItem, *, exclude_id: int | None = None) -> WorkItem | None:
        """First indexed item overlapping `candidate` (ignoring `exclude_id`), or None."""
        if candidate.start_time is None:
            return None
        for item in self:
            if item.id == exclude_id:
                continue
            if overlaps(candidate, item):
                return item
        return None

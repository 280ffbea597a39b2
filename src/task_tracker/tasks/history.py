# src/task_tracker/tasks/history.py

from __future__ import annotations

import logging
from dataclasses import dataclass

from .task_models import WorkItem

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Node:
    item: WorkItem
    prev_id: int | None = None
    next_id: int | None = None


class HistoryTracker:
    """
    Recency-ordered, duplicate-free view history.

    Storage is an arena of nodes keyed by item id. Each node keeps the ids of
    its neighbours instead of references, so:
    - detach by id is O(1) (dict lookup + two neighbour rewrites),
    - move-to-tail is detach + append,
    - snapshot walks head -> tail (oldest first).
    """

    def __init__(self) -> None:
        self._nodes: dict[int, _Node] = {}
        self._head: int | None = None
        self._tail: int | None = None

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._nodes

    # ---- low-level helpers ----

    def _link_last(self, item: WorkItem) -> None:
        node = _Node(item=item, prev_id=self._tail)
        if self._tail is None:
            self._head = item.id
        else:
            self._nodes[self._tail].next_id = item.id
        self._tail = item.id
        self._nodes[item.id] = node

    def _unlink(self, item_id: int) -> _Node | None:
        node = self._nodes.pop(item_id, None)
        if node is None:
            return None

        if node.prev_id is None:
            self._head = node.next_id
        else:
            self._nodes[node.prev_id].next_id = node.next_id

        if node.next_id is None:
            self._tail = node.prev_id
        else:
            self._nodes[node.next_id].prev_id = node.prev_id

        return node

    # ---- public API ----

    def record(self, item: WorkItem | None) -> None:
        if item is None:
            return
        self._unlink(item.id)
        self._link_last(item)

    def forget(self, item_id: int) -> None:
        if self._unlink(item_id) is not None:
            logger.debug("History: forgot id=%s", item_id)

    def ids(self) -> list[int]:
        out: list[int] = []
        cur = self._head
        while cur is not None:
            out.append(cur)
            cur = self._nodes[cur].next_id
        return out

    def snapshot(self) -> list[WorkItem]:
        return [self._nodes[i].item for i in self.ids()]

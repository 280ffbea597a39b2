# src/task_tracker/tasks/id_allocator.py

from __future__ import annotations


class IdAllocator:
    """Hands out strictly increasing positive ids; an issued id is never reissued."""

    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError("start must be >= 1")
        self._next = start

    def allocate(self) -> int:
        issued = self._next
        self._next += 1
        return issued

    def reserve(self, used_id: int) -> None:
        """Make sure `used_id` (e.g. restored from disk) is never issued again."""
        if used_id >= self._next:
            self._next = used_id + 1

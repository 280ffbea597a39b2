# src/task_tracker/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from .epic_rollup import apply_rollup
from .errors import InvalidArgument, NotFound, SchedulingConflict, TaskTrackerError, ValidationError
from .history import HistoryTracker
from .id_allocator import IdAllocator
from .priority_index import PriorityIndex, overlaps
from .task_models import Epic, Subtask, Task, WorkItem, to_local_naive

logger = logging.getLogger(__name__)

_T = TypeVar("_T", bound=WorkItem)
_E = TypeVar("_E", bound=TaskTrackerError)


class TaskStore:
    """
    In-memory store for tasks, epics and subtasks.

    Owns the id allocator, the view history and the priority index. Every
    mutation goes through here and runs in a fixed order:
      validate -> mutate collections -> update index -> recompute affected epics

    Validation happens before anything is touched, so a rejected call leaves
    no trace.

    Ownership:
    - stored instances never leave the store; getters return clones,
    - updates copy fields onto the stored instance, so history and index keep
      pointing at the live object.

    Thread-safety:
    - none; callers serialize access (see AppState.lock).
    """

    def __init__(self, *, on_change: Callable[[], None] | None = None) -> None:
        self._tasks: dict[int, Task] = {}
        self._epics: dict[int, Epic] = {}
        self._subtasks: dict[int, Subtask] = {}

        self._ids = IdAllocator()
        self._history = HistoryTracker()
        self._index = PriorityIndex()

        self._on_change = on_change

    # ---- low-level helpers ----

    @staticmethod
    def _rejected(exc: _E) -> _E:
        logger.info("Rejected: %s", exc)
        return exc

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def _require(self, item: object, cls: type[_T]) -> _T:
        if item is None:
            raise self._rejected(InvalidArgument(f"{cls.__name__} must not be None"))
        if not isinstance(item, cls):
            raise self._rejected(
                InvalidArgument(f"expected {cls.__name__}, got {type(item).__name__}")
            )
        if not isinstance(item.name, str) or not item.name.strip():
            raise self._rejected(InvalidArgument("name must be non-empty text"))
        # Fields may have been assigned after construction.
        item.start_time = to_local_naive(item.start_time)
        return item

    def _check_schedule(self, item: WorkItem, *, exclude_id: int | None = None) -> None:
        conflict = self._index.find_conflict(item, exclude_id=exclude_id)
        if conflict is not None:
            raise self._rejected(
                SchedulingConflict(
                    f"{item.kind.value} {item.name!r} overlaps {conflict.kind.value} id={conflict.id}",
                    conflict_id=conflict.id,
                )
            )

    def _check_epic_link(self, subtask: Subtask) -> None:
        epic_id = subtask.epic_id
        if not epic_id or epic_id <= 0:
            raise self._rejected(InvalidArgument("subtask must reference an epic"))
        if subtask.id and epic_id == subtask.id:
            raise self._rejected(InvalidArgument(f"subtask {subtask.id} cannot be its own epic"))
        if epic_id not in self._epics:
            raise self._rejected(InvalidArgument(f"epic id={epic_id} does not exist"))

    def _lookup(self, item_id: int) -> WorkItem | None:
        return self._tasks.get(item_id) or self._epics.get(item_id) or self._subtasks.get(item_id)

    def _subtasks_of(self, epic: Epic) -> list[Subtask]:
        return [self._subtasks[sid] for sid in epic.subtask_ids if sid in self._subtasks]

    def _recompute(self, epic_id: int) -> None:
        epic = self._epics.get(epic_id)
        if epic is None:
            return
        result = apply_rollup(epic, self._subtasks_of(epic))
        logger.debug("Epic %s rollup -> %s", epic_id, result)

    @staticmethod
    def _assign_base(stored: WorkItem, incoming: WorkItem) -> None:
        stored.name = incoming.name
        stored.description = incoming.description or ""
        stored.status = incoming.status
        stored.duration = incoming.duration
        stored.start_time = incoming.start_time

    def _forget(self, item_id: int) -> None:
        self._history.forget(item_id)
        self._index.remove(item_id)

    # ---- create ----

    def create_task(self, task: Task) -> int:
        task = self._require(task, Task)
        self._check_schedule(task)

        task.id = self._ids.allocate()
        stored = task.clone()
        self._tasks[stored.id] = stored
        self._index.upsert(stored)

        logger.debug("Task created id=%s start=%s", stored.id, stored.start_time)
        self._changed()
        return stored.id

    def create_epic(self, epic: Epic) -> int:
        epic = self._require(epic, Epic)

        epic.id = self._ids.allocate()
        stored = epic.clone()
        stored.subtask_ids = []
        self._epics[stored.id] = stored
        self._recompute(stored.id)

        logger.debug("Epic created id=%s", stored.id)
        self._changed()
        return stored.id

    def create_subtask(self, subtask: Subtask) -> int:
        subtask = self._require(subtask, Subtask)
        self._check_epic_link(subtask)
        self._check_schedule(subtask)

        subtask.id = self._ids.allocate()
        stored = subtask.clone()
        self._subtasks[stored.id] = stored
        self._index.upsert(stored)

        self._epics[stored.epic_id].add_subtask_id(stored.id)
        self._recompute(stored.epic_id)

        logger.debug("Subtask created id=%s epic=%s", stored.id, stored.epic_id)
        self._changed()
        return stored.id

    # ---- update ----

    def update_task(self, task: Task) -> None:
        task = self._require(task, Task)
        stored = self._tasks.get(task.id)
        if stored is None:
            raise self._rejected(NotFound(f"task id={task.id} not found", item_id=task.id))
        self._check_schedule(task, exclude_id=task.id)

        self._assign_base(stored, task)
        self._index.upsert(stored)

        logger.debug("Task updated id=%s", stored.id)
        self._changed()

    def update_epic(self, epic: Epic) -> None:
        epic = self._require(epic, Epic)
        stored = self._epics.get(epic.id)
        if stored is None:
            raise self._rejected(NotFound(f"epic id={epic.id} not found", item_id=epic.id))

        # Only name/description are caller-owned; the rest comes from subtasks.
        stored.name = epic.name
        stored.description = epic.description or ""
        self._recompute(stored.id)

        logger.debug("Epic updated id=%s", stored.id)
        self._changed()

    def update_subtask(self, subtask: Subtask) -> None:
        subtask = self._require(subtask, Subtask)
        stored = self._subtasks.get(subtask.id)
        if stored is None:
            raise self._rejected(NotFound(f"subtask id={subtask.id} not found", item_id=subtask.id))
        self._check_epic_link(subtask)
        self._check_schedule(subtask, exclude_id=subtask.id)

        old_epic_id = stored.epic_id
        new_epic_id = subtask.epic_id

        self._assign_base(stored, subtask)
        self._index.upsert(stored)

        if old_epic_id != new_epic_id:
            old_epic = self._epics.get(old_epic_id)
            if old_epic is not None:
                old_epic.remove_subtask_id(stored.id)
                self._recompute(old_epic_id)
            stored.epic_id = new_epic_id
            self._epics[new_epic_id].add_subtask_id(stored.id)
            logger.debug("Subtask %s moved epic %s -> %s", stored.id, old_epic_id, new_epic_id)

        self._recompute(new_epic_id)

        logger.debug("Subtask updated id=%s", stored.id)
        self._changed()

    # ---- get ----

    def get_task_by_id(self, task_id: int) -> Task | None:
        return self._get_and_record(self._tasks, task_id)

    def get_epic_by_id(self, epic_id: int) -> Epic | None:
        return self._get_and_record(self._epics, epic_id)

    def get_subtask_by_id(self, subtask_id: int) -> Subtask | None:
        return self._get_and_record(self._subtasks, subtask_id)

    def _get_and_record(self, bucket: dict[int, _T], item_id: int) -> _T | None:
        item = bucket.get(item_id)
        if item is None:
            return None
        self._history.record(item)
        return item.clone()  # type: ignore[return-value]

    def get_all_tasks(self) -> list[Task]:
        return [self._tasks[i].clone() for i in sorted(self._tasks)]  # type: ignore[misc]

    def get_all_epics(self) -> list[Epic]:
        return [self._epics[i].clone() for i in sorted(self._epics)]

    def get_all_subtasks(self) -> list[Subtask]:
        return [self._subtasks[i].clone() for i in sorted(self._subtasks)]  # type: ignore[misc]

    def get_subtasks_by_epic_id(self, epic_id: int) -> list[Subtask]:
        epic = self._epics.get(epic_id)
        if epic is None:
            return []
        return [s.clone() for s in self._subtasks_of(epic)]  # type: ignore[misc]

    def get_prioritized_tasks(self) -> list[WorkItem]:
        return [item.clone() for item in self._index]

    def get_history(self) -> list[WorkItem]:
        return [item.clone() for item in self._history.snapshot()]

    def history_ids(self) -> list[int]:
        return self._history.ids()

    def counts(self) -> dict[str, int]:
        return {
            "tasks": len(self._tasks),
            "epics": len(self._epics),
            "subtasks": len(self._subtasks),
            "scheduled": len(self._index),
            "history": len(self._history),
        }

    # ---- overlap queries ----

    @staticmethod
    def is_overlapping(a: WorkItem, b: WorkItem) -> bool:
        return overlaps(a, b)

    def has_overlaps(self, item: WorkItem) -> bool:
        exclude = item.id if item.id and self._lookup(item.id) is not None else None
        return self._index.find_conflict(item, exclude_id=exclude) is not None

    # ---- delete ----

    def delete_task_by_id(self, task_id: int) -> bool:
        task = self._tasks.pop(task_id, None)
        if task is None:
            return False
        self._forget(task_id)

        logger.debug("Task deleted id=%s", task_id)
        self._changed()
        return True

    def delete_subtask_by_id(self, subtask_id: int) -> bool:
        subtask = self._subtasks.pop(subtask_id, None)
        if subtask is None:
            return False
        self._forget(subtask_id)

        epic = self._epics.get(subtask.epic_id)
        if epic is not None:
            epic.remove_subtask_id(subtask_id)
            self._recompute(epic.id)

        logger.debug("Subtask deleted id=%s epic=%s", subtask_id, subtask.epic_id)
        self._changed()
        return True

    def delete_epic_by_id(self, epic_id: int) -> bool:
        epic = self._epics.pop(epic_id, None)
        if epic is None:
            return False
        for sid in epic.subtask_ids:
            self._subtasks.pop(sid, None)
            self._forget(sid)
        self._history.forget(epic_id)

        logger.debug("Epic deleted id=%s (cascade %d subtasks)", epic_id, len(epic.subtask_ids))
        self._changed()
        return True

    def delete_all_tasks(self) -> None:
        for tid in self._tasks:
            self._forget(tid)
        self._tasks.clear()

        logger.debug("All tasks deleted")
        self._changed()

    def delete_all_subtasks(self) -> None:
        for sid in self._subtasks:
            self._forget(sid)
        self._subtasks.clear()

        for epic in self._epics.values():
            epic.subtask_ids.clear()
            self._recompute(epic.id)

        logger.debug("All subtasks deleted")
        self._changed()

    def delete_all_epics(self) -> None:
        for sid in self._subtasks:
            self._forget(sid)
        self._subtasks.clear()

        for eid in self._epics:
            self._history.forget(eid)
        self._epics.clear()

        logger.debug("All epics deleted (with subtasks)")
        self._changed()

    # ---- restore (persistence loader) ----

    def _check_restorable_id(self, item: WorkItem) -> None:
        if item.id <= 0:
            raise ValidationError(f"{item.kind.value} has non-positive id={item.id}")
        if self._lookup(item.id) is not None:
            raise ValidationError(f"duplicate id={item.id}")

    def restore_task(self, task: Task) -> None:
        self._check_restorable_id(task)
        stored = task.clone()
        self._tasks[stored.id] = stored
        self._ids.reserve(stored.id)
        self._index.upsert(stored)

    def restore_epic(self, epic: Epic) -> None:
        self._check_restorable_id(epic)
        stored = epic.clone()
        self._epics[stored.id] = stored
        self._ids.reserve(stored.id)

    def restore_subtask(self, subtask: Subtask) -> None:
        self._check_restorable_id(subtask)
        if subtask.epic_id == subtask.id:
            raise ValidationError(f"subtask {subtask.id} references itself as epic")
        epic = self._epics.get(subtask.epic_id)
        if epic is None:
            raise ValidationError(f"subtask {subtask.id} references unknown epic id={subtask.epic_id}")

        stored = subtask.clone()
        self._subtasks[stored.id] = stored
        self._ids.reserve(stored.id)
        self._index.upsert(stored)
        epic.add_subtask_id(stored.id)

    def restore_history(self, ids: Iterable[int]) -> None:
        for item_id in ids:
            item = self._lookup(item_id)
            if item is None:
                logger.warning("History references unknown id=%s; skipped", item_id)
                continue
            self._history.record(item)

    def finish_restore(self) -> None:
        """Check epic <-> subtask links and recompute every epic."""
        for epic in self._epics.values():
            for sid in epic.subtask_ids:
                sub = self._subtasks.get(sid)
                if sub is None or sub.epic_id != epic.id:
                    raise ValidationError(f"epic {epic.id} lists id={sid} which is not its subtask")
        for epic_id in self._epics:
            self._recompute(epic_id)
        logger.info("TaskStore restored %s", self.counts())

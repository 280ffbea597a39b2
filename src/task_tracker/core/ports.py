# src/task_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by connectors.

Connectors depend on Protocols instead of the concrete TaskStore.
This keeps transports thin and makes testing easier.
"""

from typing import Protocol

from ..tasks.task_models import Epic, Subtask, Task, WorkItem


class TaskRepo(Protocol):
    # Create
    def create_task(self, task: Task) -> int: ...
    def create_epic(self, epic: Epic) -> int: ...
    def create_subtask(self, subtask: Subtask) -> int: ...

    # Update
    def update_task(self, task: Task) -> None: ...
    def update_epic(self, epic: Epic) -> None: ...
    def update_subtask(self, subtask: Subtask) -> None: ...

    # Lookup (records history on success)
    def get_task_by_id(self, task_id: int) -> Task | None: ...
    def get_epic_by_id(self, epic_id: int) -> Epic | None: ...
    def get_subtask_by_id(self, subtask_id: int) -> Subtask | None: ...

    # Listings (never touch history)
    def get_all_tasks(self) -> list[Task]: ...
    def get_all_epics(self) -> list[Epic]: ...
    def get_all_subtasks(self) -> list[Subtask]: ...
    def get_subtasks_by_epic_id(self, epic_id: int) -> list[Subtask]: ...
    def get_prioritized_tasks(self) -> list[WorkItem]: ...
    def get_history(self) -> list[WorkItem]: ...
    def counts(self) -> dict[str, int]: ...

    # Delete
    def delete_task_by_id(self, task_id: int) -> bool: ...
    def delete_epic_by_id(self, epic_id: int) -> bool: ...
    def delete_subtask_by_id(self, subtask_id: int) -> bool: ...
    def delete_all_tasks(self) -> None: ...
    def delete_all_epics(self) -> None: ...
    def delete_all_subtasks(self) -> None: ...


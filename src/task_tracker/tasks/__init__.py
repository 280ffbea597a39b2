"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Epic, Subtask, TaskStatus)
- errors.py: exception hierarchy shared by store, persistence and connectors
- id_allocator.py: one id sequence for all kinds
- history.py: recently viewed items, de-duplicated, oldest first
- priority_index.py: scheduled items ordered by start time + overlap checks
- epic_rollup.py: epic status/time derived from its subtasks
- task_store.py: in-memory store tying the pieces together
- file_store.py: CSV persistence and the autosaving store
"""

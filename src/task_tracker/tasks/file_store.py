# src/task_tracker/tasks/file_store.py

from __future__ import annotations

"""
File-backed persistence for TaskStore.

File layout (CSV, one entity per line):
    id,type,name,status,description,epic,duration,start_time
    1,TASK,Write docs,NEW,,,30,2024-05-01T10:00
    2,EPIC,Release,IN_PROGRESS,,3;4,45,2024-05-01T11:00
    3,SUBTASK,Tag,DONE,,2,15,2024-05-01T11:00
    <empty line>
    3,1

- `epic` holds the owning epic id (subtask) or `;`-joined subtask ids (epic),
- duration is whole minutes, start_time is minute precision,
- an empty field means "absent",
- the last line lists history ids, oldest first.

Loading goes through the store's restore path: overlap checks are skipped,
structural problems raise ValidationError.
"""

import contextlib
import csv
import io
import logging
import os
from datetime import datetime, timedelta
from pathlib import Path

from .errors import PersistenceError, ValidationError
from .task_models import Epic, Subtask, Task, TaskKind, TaskStatus, WorkItem
from .task_store import TaskStore

logger = logging.getLogger(__name__)

HEADER = ["id", "type", "name", "status", "description", "epic", "duration", "start_time"]
DATETIME_FORMAT = "%Y-%m-%dT%H:%M"
SUBTASK_ID_SEPARATOR = ";"
_RESTORE_ORDER = {TaskKind.TASK: 0, TaskKind.EPIC: 1, TaskKind.SUBTASK: 2}


# ---- field codecs ----


def _fmt_duration(value: timedelta | None) -> str:
    if value is None:
        return ""
    return str(int(value.total_seconds() // 60))


def _fmt_start(value: datetime | None) -> str:
    return "" if value is None else value.strftime(DATETIME_FORMAT)


def _parse_duration(raw: str) -> timedelta | None:
    raw = raw.strip()
    return None if not raw else timedelta(minutes=int(raw))


def _parse_start(raw: str) -> datetime | None:
    raw = raw.strip()
    return None if not raw else datetime.strptime(raw, DATETIME_FORMAT)


def item_to_row(item: WorkItem) -> list[str]:
    match item:
        case Epic():
            link = SUBTASK_ID_SEPARATOR.join(str(i) for i in item.subtask_ids)
        case Subtask():
            link = str(item.epic_id)
        case _:
            link = ""
    return [
        str(item.id),
        item.kind.value,
        item.name,
        item.status.value,
        item.description,
        link,
        _fmt_duration(item.duration),
        _fmt_start(item.start_time),
    ]


def row_to_item(row: list[str]) -> Task | Epic | Subtask:
    if len(row) != len(HEADER):
        raise ValueError(f"expected {len(HEADER)} fields, got {len(row)}")

    raw_id, raw_kind, name, raw_status, description, link, raw_duration, raw_start = row
    item_id = int(raw_id)
    kind = TaskKind(raw_kind.strip().upper())
    status = TaskStatus.from_db(raw_status)
    duration = _parse_duration(raw_duration)
    start_time = _parse_start(raw_start)

    match kind:
        case TaskKind.TASK:
            return Task(
                name=name,
                description=description,
                status=status,
                duration=duration,
                start_time=start_time,
                id=item_id,
            )
        case TaskKind.EPIC:
            ids = [int(p) for p in link.split(SUBTASK_ID_SEPARATOR) if p.strip()]
            return Epic(name=name, description=description, id=item_id, subtask_ids=ids)
        case TaskKind.SUBTASK:
            if not link.strip():
                raise ValueError("subtask record has no epic id")
            return Subtask(
                name=name,
                description=description,
                status=status,
                duration=duration,
                start_time=start_time,
                id=item_id,
                epic_id=int(link),
            )
    raise ValueError(f"unknown kind: {raw_kind!r}")


# ---- save / load ----


def dump_store(store: TaskStore) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(HEADER)
    for item in (*store.get_all_tasks(), *store.get_all_epics(), *store.get_all_subtasks()):
        writer.writerow(item_to_row(item))
    buf.write("\n")
    writer.writerow([str(i) for i in store.history_ids()])
    return buf.getvalue()


def save_store(store: TaskStore, path: str | Path) -> None:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(dump_store(store), "utf-8")
        os.replace(tmp, path)
        with contextlib.suppress(OSError):
            os.chmod(path, 0o600)
    except OSError as e:
        raise PersistenceError(f"failed to save tasks to {path}: {e}") from e
    logger.debug("Saved tasks to %s", path)


def parse_store(text: str, store: TaskStore | None = None) -> TaskStore:
    """Restore `text` (as written by dump_store) into `store` (a fresh one by default)."""
    if store is None:
        store = TaskStore()

    reader = csv.reader(io.StringIO(text, newline=""))
    items: list[Task | Epic | Subtask] = []
    history: list[int] = []

    header_seen = False
    in_history = False
    for row in reader:
        line_no = reader.line_num
        if not header_seen:
            if [c.strip() for c in row] != HEADER:
                raise ValidationError(f"line {line_no}: unexpected header {row!r}")
            header_seen = True
            continue
        if not row:
            in_history = True
            continue
        try:
            if in_history:
                history.extend(int(c) for c in row if c.strip())
            else:
                items.append(row_to_item(row))
        except (ValueError, TypeError) as e:
            raise ValidationError(f"line {line_no}: {e}") from e

    # Epics first so subtasks can link regardless of record order.
    for item in sorted(items, key=lambda i: _RESTORE_ORDER[i.kind]):
        match item:
            case Epic():
                store.restore_epic(item)
            case Subtask():
                store.restore_subtask(item)
            case Task():
                store.restore_task(item)

    store.finish_restore()
    store.restore_history(history)
    return store


def load_store(path: str | Path, store: TaskStore | None = None) -> TaskStore:
    path = Path(path)
    if store is None:
        store = TaskStore()
    if not path.exists():
        logger.info("No task file at %s; starting empty", path)
        return store
    try:
        text = path.read_text("utf-8")
    except OSError as e:
        raise PersistenceError(f"failed to read tasks from {path}: {e}") from e
    if not text.strip():
        return store
    parse_store(text, store)
    logger.info("Loaded tasks from %s", path)
    return store


class FileBackedTaskStore(TaskStore):
    """
    TaskStore that rewrites its file after every successful mutation.

    A failed autosave does not undo or fail the mutation: it is logged and
    `dirty` stays set, so the next save (/save, shutdown, next mutation)
    writes everything again. Explicit `save()` still raises PersistenceError.
    """

    def __init__(self, path: str | Path, *, autosave: bool = True) -> None:
        super().__init__(on_change=self._on_change_autosave)
        self.path = Path(path)
        self.autosave = autosave
        self.dirty = False

    def _on_change_autosave(self) -> None:
        self.dirty = True
        if not self.autosave:
            return
        try:
            self.save()
        except PersistenceError:
            logger.exception("Autosave failed; changes are kept in memory until the next save.")

    def save(self) -> None:
        save_store(self, self.path)
        self.dirty = False

    @classmethod
    def load(cls, path: str | Path, *, autosave: bool = True) -> FileBackedTaskStore:
        store = cls(path, autosave=autosave)
        load_store(store.path, store)
        return store

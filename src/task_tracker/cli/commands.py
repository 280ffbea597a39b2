# src/task_tracker/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import TypeVar, cast

from ..core.state import AppState
from ..tasks.errors import TaskTrackerError
from ..tasks.task_models import Epic, Subtask, Task, TaskStatus, WorkItem

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

_W = TypeVar("_W", bound=WorkItem)

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /task, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Domain errors and bad arguments become one-line replies.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except TaskTrackerError as e:
            logger.debug("/%s rejected: %s", name, e)
            return f"Error: {e}"
        except ValueError as e:
            return f"Bad arguments for /{name}: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting / parsing helpers ----


def format_item(item: WorkItem) -> str:
    parts = [f"#{item.id}", item.kind.value, repr(item.name), f"[{item.status.value}]"]
    if item.start_time is not None:
        parts.append(item.start_time.strftime("%Y-%m-%d %H:%M"))
    if item.duration is not None:
        parts.append(f"+{int(item.duration.total_seconds() // 60)}m")
    if isinstance(item, Subtask):
        parts.append(f"(epic {item.epic_id})")
    if isinstance(item, Epic):
        parts.append(f"subtasks={item.subtask_ids}")
    if item.description:
        parts.append(f"- {item.description}")
    return " ".join(parts)


def _format_list(title: str, items: Sequence[WorkItem]) -> str:
    if not items:
        return f"{title}: (empty)"
    return "\n".join([f"{title}:"] + [f"  {format_item(i)}" for i in items])


def parse_item_args(words: list[str]) -> tuple[str, str, datetime | None, timedelta | None]:
    """
    "<name> [| description] [@ <start> <minutes>]" -> (name, description, start, duration).

    start is ISO-8601 ("2024-05-01T10:00"). The "@" must stand alone, so names
    like "mail bob@example.com" are left intact.
    """
    # Padded so a leading or trailing bare "@" still counts as the separator.
    text = " " + " ".join(words) + " "
    start: datetime | None = None
    duration: timedelta | None = None

    if " @ " in text:
        text, _, sched = text.rpartition(" @ ")
        sched_parts = sched.split()
        if not sched_parts:
            raise ValueError("expected '@ <start> [minutes]'")
        start = datetime.fromisoformat(sched_parts[0])
        if len(sched_parts) > 1:
            duration = timedelta(minutes=int(sched_parts[1]))

    name, _, description = text.partition("|")
    name = name.strip()
    if not name:
        raise ValueError("name is required")
    return name, description.strip(), start, duration


def _parse_id(raw: str) -> int:
    return int(raw.lstrip("#"))


def _find(items: Sequence[_W], item_id: int) -> _W | None:
    for item in items:
        if item.id == item_id:
            return item
    return None


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    counts = state.store.counts()
    path = getattr(state.settings, "storage_path", None)
    return (
        "Status:\n"
        f"  Tasks: {counts['tasks']}  Epics: {counts['epics']}  Subtasks: {counts['subtasks']}\n"
        f"  Scheduled: {counts['scheduled']}  History: {counts['history']}\n"
        f"  Storage: {path or 'in-memory'}"
    )


def cmd_task(state: AppState, args: list[str]) -> str:
    """
    /task add <name> [| description] [@ <start> <minutes>]
    /task show <id>
    /task done <id>
    /task status <id> <NEW|IN_PROGRESS|DONE>
    /task del <id>
    /task list
    /task clear
    """
    store = state.store
    sub = args[0].lower() if args else "list"
    rest = args[1:]

    if sub == "add":
        name, description, start, duration = parse_item_args(rest)
        task_id = store.create_task(
            Task(name=name, description=description, start_time=start, duration=duration)
        )
        return f"Task created: #{task_id}"

    if sub == "show" and rest:
        task = store.get_task_by_id(_parse_id(rest[0]))
        return format_item(task) if task else f"No task #{rest[0]}."

    if (sub == "done" and rest) or (sub == "status" and len(rest) > 1):
        status = TaskStatus.DONE if sub == "done" else TaskStatus.from_db(rest[1])
        task = _find(store.get_all_tasks(), _parse_id(rest[0]))
        if task is None:
            return f"No task #{rest[0]}."
        task.status = status
        store.update_task(task)
        return f"Task #{task.id} -> {status.value}"

    if sub == "del" and rest:
        deleted = store.delete_task_by_id(_parse_id(rest[0]))
        return f"Task #{rest[0]} deleted." if deleted else f"No task #{rest[0]}."

    if sub == "list":
        return _format_list("Tasks", store.get_all_tasks())

    if sub == "clear":
        store.delete_all_tasks()
        return "All tasks deleted."

    return (cmd_task.__doc__ or "").strip()


def cmd_epic(state: AppState, args: list[str]) -> str:
    """
    /epic add <name> [| description]
    /epic show <id>
    /epic rename <id> <name> [| description]
    /epic subs <id>
    /epic del <id>
    /epic list
    /epic clear
    """
    store = state.store
    sub = args[0].lower() if args else "list"
    rest = args[1:]

    if sub == "add":
        name, description, _, _ = parse_item_args(rest)
        epic_id = store.create_epic(Epic(name=name, description=description))
        return f"Epic created: #{epic_id}"

    if sub == "show" and rest:
        epic = store.get_epic_by_id(_parse_id(rest[0]))
        return format_item(epic) if epic else f"No epic #{rest[0]}."

    if sub == "rename" and len(rest) > 1:
        name, description, _, _ = parse_item_args(rest[1:])
        epic_id = _parse_id(rest[0])
        store.update_epic(Epic(name=name, description=description, id=epic_id))
        return f"Epic #{epic_id} renamed."

    if sub == "subs" and rest:
        epic_id = _parse_id(rest[0])
        return _format_list(f"Subtasks of epic #{epic_id}", store.get_subtasks_by_epic_id(epic_id))

    if sub == "del" and rest:
        deleted = store.delete_epic_by_id(_parse_id(rest[0]))
        return f"Epic #{rest[0]} deleted (with subtasks)." if deleted else f"No epic #{rest[0]}."

    if sub == "list":
        return _format_list("Epics", store.get_all_epics())

    if sub == "clear":
        store.delete_all_epics()
        return "All epics and subtasks deleted."

    return (cmd_epic.__doc__ or "").strip()


def cmd_sub(state: AppState, args: list[str]) -> str:
    """
    /sub add <epic_id> <name> [| description] [@ <start> <minutes>]
    /sub show <id>
    /sub status <id> <NEW|IN_PROGRESS|DONE>
    /sub move <id> <epic_id>
    /sub del <id>
    /sub list
    /sub clear
    """
    store = state.store
    sub = args[0].lower() if args else "list"
    rest = args[1:]

    if sub == "add" and len(rest) > 1:
        epic_id = _parse_id(rest[0])
        name, description, start, duration = parse_item_args(rest[1:])
        subtask_id = store.create_subtask(
            Subtask(
                name=name,
                description=description,
                start_time=start,
                duration=duration,
                epic_id=epic_id,
            )
        )
        return f"Subtask created: #{subtask_id} (epic #{epic_id})"

    if sub == "show" and rest:
        subtask = store.get_subtask_by_id(_parse_id(rest[0]))
        return format_item(subtask) if subtask else f"No subtask #{rest[0]}."

    if sub in ("status", "move") and len(rest) > 1:
        subtask = _find(store.get_all_subtasks(), _parse_id(rest[0]))
        if subtask is None:
            return f"No subtask #{rest[0]}."
        if sub == "status":
            subtask.status = TaskStatus.from_db(rest[1])
        else:
            subtask.epic_id = _parse_id(rest[1])
        store.update_subtask(subtask)
        return f"Subtask #{subtask.id} updated: {format_item(subtask)}"

    if sub == "del" and rest:
        deleted = store.delete_subtask_by_id(_parse_id(rest[0]))
        return f"Subtask #{rest[0]} deleted." if deleted else f"No subtask #{rest[0]}."

    if sub == "list":
        return _format_list("Subtasks", store.get_all_subtasks())

    if sub == "clear":
        store.delete_all_subtasks()
        return "All subtasks deleted."

    return (cmd_sub.__doc__ or "").strip()


def cmd_history(state: AppState, args: list[str]) -> str:
    return _format_list("History (oldest first)", state.store.get_history())


def cmd_prioritized(state: AppState, args: list[str]) -> str:
    return _format_list("By start time", state.store.get_prioritized_tasks())


def cmd_save(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        emit("[STORE] Saving...")
    if state.save():
        return f"Saved to {getattr(state.settings, 'storage_path', '?')}."
    return "Store is in-memory only; nothing to save."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show item counts and storage path.")
registry.register("task", cmd_task, help_text="Tasks: /task add|show|done|status|del|list|clear.")
registry.register("epic", cmd_epic, help_text="Epics: /epic add|show|rename|subs|del|list|clear.")
registry.register("sub", cmd_sub, help_text="Subtasks: /sub add|show|status|move|del|list|clear.")
registry.register("history", cmd_history, help_text="Recently viewed items, oldest first.")
registry.register(
    "prioritized", cmd_prioritized, help_text="Scheduled items by start time.", aliases=["prio"]
)
registry.register("save", cmd_save, help_text="Write the store to disk now.")

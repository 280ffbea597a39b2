# tests/test_bootstrap_console.py

from __future__ import annotations

from collections.abc import Iterator

import pytest

from task_tracker.cli.bootstrap import create_initial_state, save_state
from task_tracker.connectors.console_connector import run_console_loop
from task_tracker.tasks.errors import ValidationError
from task_tracker.tasks.file_store import FileBackedTaskStore
from task_tracker.tasks.task_models import Task


def _scripted(lines: list[str]):
    it: Iterator[str] = iter(lines)

    def fake_input(_prompt: str) -> str:
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    return fake_input


def test_initial_state_is_file_backed(settings) -> None:
    state = create_initial_state(settings=settings)
    assert isinstance(state.store, FileBackedTaskStore)

    state.store.create_task(Task(name="kept"))
    assert settings.storage_path.exists()

    again = create_initial_state(settings=settings)
    assert [t.name for t in again.store.get_all_tasks()] == ["kept"]


def test_corrupt_file_stops_startup(settings) -> None:
    settings.storage_path.write_text("garbage\n", "utf-8")
    with pytest.raises(ValidationError):
        create_initial_state(settings=settings)
    # The bad file is left for the user to inspect.
    assert settings.storage_path.read_text("utf-8") == "garbage\n"


def test_save_state_flushes_without_autosave(settings) -> None:
    settings.autosave = False
    state = create_initial_state(settings=settings)
    state.store.create_task(Task(name="pending"))
    assert not settings.storage_path.exists()

    save_state(state)
    assert "pending" in settings.storage_path.read_text("utf-8")


def test_console_loop_runs_commands_until_exit(state, capsys) -> None:
    run_console_loop(
        state,
        input_fn=_scripted(["/task add Buy milk", "", "hello", "/task list", "/exit", "/task add never"]),
    )
    out = capsys.readouterr().out

    assert "Task created: #1" in out
    assert "Buy milk" in out
    assert "Use /help" in out
    assert [t.name for t in state.store.get_all_tasks()] == ["Buy milk"]


def test_console_loop_stops_on_eof(state, capsys) -> None:
    run_console_loop(state, input_fn=_scripted(["/epic add E"]))
    assert "Epic created: #1" in capsys.readouterr().out

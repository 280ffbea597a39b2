# src/task_tracker/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

EXIT_WORDS = frozenset({"/exit", "/quit", "/q"})
NOT_A_COMMAND = "Commands start with '/'. Use /help to list them."


def _stamp() -> str:
    return datetime.now().astimezone().strftime("%H:%M:%S")


def _say(text: str) -> None:
    print(f"[{_stamp()}] {text}", flush=True)


def _echo_input(line: str) -> None:
    # Overwrite the bare prompt line with a timestamped copy on terminals.
    if sys.stdout.isatty():
        sys.stdout.write(f"\033[1A\033[2K\r[{_stamp()}] >>> {line}\n")
        sys.stdout.flush()


def _banner(state: AppState) -> str:
    name = getattr(state.settings, "app_name", "task-tracker")
    with state.lock:
        c = state.store.counts()
    return (
        f"{name}: {c['tasks']} tasks, {c['epics']} epics, {c['subtasks']} subtasks loaded. "
        "Type /help for commands, /exit to quit."
    )


def run_console_loop(state: AppState, *, input_fn: Callable[[str], str] = input) -> None:
    """Blocking REPL on the main thread. Returns on /exit, EOF or Ctrl+C."""
    logger.info("Console connector started.")
    _say(_banner(state))

    while True:
        try:
            line = input_fn(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            print()
            logger.info("Console KeyboardInterrupt, exiting.")
            break

        if not line:
            continue
        _echo_input(line)

        if line.lower() in EXIT_WORDS:
            logger.info("Console exit command received.")
            break

        try:
            with state.lock:
                reply = command_registry.handle(state, line, emit=_say)
        except Exception:
            # Domain errors are already replies; anything here is a bug.
            logger.exception("Command %r crashed.", line)
            reply = "Internal error while handling the command (see log)."

        _say(reply if reply is not None else NOT_A_COMMAND)

    logger.info("Console connector finished.")

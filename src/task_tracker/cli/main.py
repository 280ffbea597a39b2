# src/task_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts connectors:
- console REPL in the main thread (optional),
- HTTP API in a background thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading
from typing import TYPE_CHECKING

from ..cli.bootstrap import create_initial_state, save_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..connectors.http_api import HttpBackgroundRunner


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/tracker")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "task-tracker"))

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    http_runner: HttpBackgroundRunner | None = None
    if settings.http_enabled:
        from ..connectors.http_api import start_http_in_background

        http_runner = start_http_in_background(state)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        # Not on the main thread, or the platform lacks SIGTERM.
        logger.debug("Signal handlers not installed.", exc_info=True)

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        elif http_runner is not None:
            logger.info("Console disabled. Serving HTTP only. Press Ctrl+C to stop.")
            stop_main.wait()
        else:
            logger.warning("Console and HTTP are both disabled; nothing to run.")

    finally:
        if http_runner is not None:
            http_runner.stop()
            http_runner.join(timeout=10.0)

        save_state(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()

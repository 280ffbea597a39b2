# src/task_tracker/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

APP_LOGGER_PREFIX = "task_tracker."

# Minimum level shown on the console per third-party logger (prefix match).
# uvicorn.access would print one line per HTTP request while the REPL is open.
_CONSOLE_FLOORS: tuple[tuple[str, int], ...] = (
    ("uvicorn.access", logging.WARNING),
    ("uvicorn", logging.INFO),
    ("py.warnings", logging.ERROR),
)


class _ConsoleNoiseFilter(logging.Filter):
    """Own package passes through; third-party loggers need their floor (ERROR by default)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(APP_LOGGER_PREFIX) or record.name == "__main__":
            return True
        for prefix, floor in _CONSOLE_FLOORS:
            if record.name == prefix or record.name.startswith(prefix + "."):
                return record.levelno >= floor
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/tracker",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 2_000_000,
    backups: int = 3,
) -> Path:
    """
    Console (filtered, stderr so it does not mix with REPL replies on stdout)
    plus a rotating file with everything at `file_level`.

    Call once at startup, before the store is loaded. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "tracker.log"

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    to_file = RotatingFileHandler(
        str(log_file), maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
    )
    to_file.setLevel(file_level)
    to_file.setFormatter(fmt)
    root.addHandler(to_file)

    logging.captureWarnings(True)
    return log_file

# src/task_tracker/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from .ports import TaskRepo


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    store: TaskRepo

    # One lock around the whole store: console and HTTP run in different threads,
    # and history/index/rollup assume a consistent view for the whole operation.
    lock: threading.RLock = field(default_factory=threading.RLock)

    def save(self) -> bool:
        """Flush the store to disk if it is file-backed. Returns True if something was written."""
        save = getattr(self.store, "save", None)
        if save is None:
            return False
        with self.lock:
            save()
        return True

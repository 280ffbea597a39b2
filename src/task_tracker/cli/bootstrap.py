# src/task_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the file-backed store into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.file_store import FileBackedTaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().

    Loading errors (ValidationError/PersistenceError) propagate: starting with an
    empty store would overwrite the user's file on the next autosave.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = FileBackedTaskStore.load(settings.storage_path, autosave=settings.autosave)
    logger.info("Store ready path=%s counts=%s", settings.storage_path, store.counts())

    return AppState(settings=settings, store=store)


def save_state(state: AppState) -> None:
    """Best-effort final flush on shutdown."""
    try:
        if state.save():
            logger.info("Saved tasks to %s", getattr(state.settings, "storage_path", "?"))
    except Exception:
        logger.exception("Failed to save tasks on shutdown.")

# src/teamtrack/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the SQLite database, stores and per-entity locks into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.database import Database
from ..core.locks import KeyedLocks
from ..core.state import AppState
from ..tasks.task_store import TaskStore
from ..users.user_store import UserStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    db = Database(settings.db_path, timeout=settings.db_timeout_seconds)
    state = AppState(
        settings=settings,
        users=UserStore(db),
        tasks=TaskStore(db),
        db=db,
        locks=KeyedLocks(timeout=settings.lock_timeout_seconds),
    )
    logger.debug("AppState ready db=%s", settings.db_path)
    return state

# src/teamtrack/core/state.py

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .locks import KeyedLocks
from .ports import TaskRepo, UnitOfWork, UserRepo


@dataclass
class AppState:
    """
    Everything an operation needs: settings, stores, the transaction boundary,
    per-entity locks and the clock. Built once by cli.bootstrap (or test fixtures).
    """

    # Settings object (teamtrack.config.Settings or a test SimpleNamespace).
    settings: Any

    users: UserRepo
    tasks: TaskRepo
    db: UnitOfWork

    locks: KeyedLocks = field(default_factory=KeyedLocks)
    clock: Callable[[], float] = time.time

    def now(self) -> float:
        return float(self.clock())

# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from teamtrack.core.database import Database
from teamtrack.core.locks import KeyedLocks
from teamtrack.core.state import AppState
from teamtrack.tasks.task_store import TaskStore
from teamtrack.users import user_api
from teamtrack.users.user_models import User

from .fakes import FakeClock, FlakyUserStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the engine.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="teamtrack-test",
        data_dir=tmp_path,
        db_path=tmp_path / "teamtrack.sqlite3",
        db_timeout_seconds=30.0,
        lock_timeout_seconds=10.0,
        auto_award=True,
        recent_tasks_limit=10,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def db(settings: SimpleNamespace) -> Database:
    return Database(settings.db_path, timeout=settings.db_timeout_seconds)


@pytest.fixture()
def state(settings: SimpleNamespace, db: Database, clock: FakeClock) -> AppState:
    """
    AppState over real SQLite stores in tmp_path.

    NOTE: the stores are real because transactional behaviour is part of what we test.
    """
    return AppState(
        settings=settings,
        users=FlakyUserStore(db),
        tasks=TaskStore(db),
        db=db,
        locks=KeyedLocks(timeout=settings.lock_timeout_seconds),
        clock=clock,
    )


@pytest.fixture()
def manager(state: AppState) -> User:
    return user_api.register_user(state, username="mia", email="mia@example.com", role="manager")


@pytest.fixture()
def member(state: AppState, manager: User) -> User:
    """An approved member."""
    pending = user_api.register_user(state, username="umar", email="umar@example.com")
    approved = user_api.approve_or_reject_member(state, manager.id, pending.id, approve=True)
    assert approved is not None
    return approved


@pytest.fixture()
def pending_member(state: AppState) -> User:
    return user_api.register_user(state, username="pia", email="pia@example.com", role="member")

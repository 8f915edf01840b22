# tests/test_locks_and_config.py

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from teamtrack.cli.bootstrap import create_initial_state
from teamtrack.config import Settings
from teamtrack.core.errors import CollaboratorFailure
from teamtrack.core.locks import KeyedLocks, task_key, user_key
from teamtrack.tasks import task_api
from teamtrack.users.user_store import UserStore


def test_keys_are_namespaced() -> None:
    assert task_key("1") == "task:1"
    assert user_key("1") == "user:1"
    assert task_key("1") != user_key("1")


def test_lock_timeout_surfaces_as_collaborator_failure() -> None:
    locks = KeyedLocks(timeout=0.05)
    held = threading.Event()
    release = threading.Event()

    def holder() -> None:
        with locks.hold("user:1"):
            held.set()
            release.wait(5)

    t = threading.Thread(target=holder)
    t.start()
    try:
        assert held.wait(5)
        with pytest.raises(CollaboratorFailure):
            with locks.hold("user:1"):
                pass
        # Other keys are independent.
        with locks.hold("user:2"):
            pass
    finally:
        release.set()
        t.join(5)

    with locks.hold("user:1"):
        pass


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TEAMTRACK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TEAMTRACK_AUTO_AWARD", "no")
    monkeypatch.setenv("TEAMTRACK_RECENT_TASKS_LIMIT", "5")
    monkeypatch.setenv("TEAMTRACK_LOCK_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.delenv("TEAMTRACK_DB_PATH", raising=False)

    s = Settings.from_env()

    assert s.data_dir == tmp_path
    assert s.db_path == tmp_path / "teamtrack.sqlite3"
    assert s.auto_award is False
    assert s.recent_tasks_limit == 5
    assert s.lock_timeout_seconds == 10.0


def test_bootstrap_wires_sqlite_stores(settings) -> None:
    state = create_initial_state(settings=settings)

    assert isinstance(state.users, UserStore)
    assert state.tasks.count_tasks() == 0
    assert settings.db_path.exists()


def test_lock_entries_are_dropped_once_released() -> None:
    locks = KeyedLocks(timeout=0.05)
    with locks.hold(task_key("1")), locks.hold(user_key("1")):
        assert len(locks._locks) == 2
    assert len(locks._locks) == 0

    # A timed-out waiter does not leave its entry behind either.
    with locks.hold("task:busy"):
        errors: list[BaseException] = []

        def wait() -> None:
            try:
                with locks.hold("task:busy"):
                    pass
            except CollaboratorFailure as exc:
                errors.append(exc)

        t = threading.Thread(target=wait)
        t.start()
        t.join(5)
        assert len(errors) == 1
        assert len(locks._locks) == 1
    assert len(locks._locks) == 0


def test_task_churn_does_not_accumulate_locks(state, manager, member) -> None:
    for i in range(20):
        task = task_api.create_task(state, manager.id, title=f"t{i}", assigned_to=member.id)
        task_api.update_task(state, member.id, task.id, {"status": "completed"})
        task_api.delete_task(state, manager.id, task.id)

    assert len(state.locks._locks) == 0
    assert state.users.get_user(member.id).total_tasks_completed == 20

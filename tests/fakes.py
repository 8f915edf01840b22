# tests/fakes.py

from __future__ import annotations

from teamtrack.core.errors import CollaboratorFailure
from teamtrack.users.user_models import User
from teamtrack.users.user_store import UserStore


class FakeClock:
    """Deterministic clock for AppState.clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += float(seconds)


class FlakyUserStore(UserStore):
    """
    Real SQLite UserStore whose save_user can be switched to fail.

    Shares the Database with the TaskStore, so a failure inside a lifecycle
    transaction must roll the task write back as well.
    """

    fail_saves = False

    def save_user(self, user: User) -> None:
        if self.fail_saves:
            raise CollaboratorFailure("identity store unavailable")
        super().save_user(user)

# src/teamtrack/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the engine.

The engine depends on Protocols instead of concrete implementations.
This keeps storage swappable and makes testing easier.

Conventions:
- get_*/find_* return None for missing records; the operations layer raises NotFound
- delete_* raise NotFound when nothing was deleted
- save_user raises Conflict on a duplicate unique field
- any store failure surfaces as CollaboratorFailure
"""

from contextlib import AbstractContextManager
from typing import Any, Protocol

from ..tasks.task_models import Task, TaskStatus
from ..users.user_models import User, UserRole


class UserRepo(Protocol):
    def get_user(self, user_id: str) -> User | None: ...
    def find_user_by_email(self, email: str) -> User | None: ...
    def find_user_by_username(self, username: str) -> User | None: ...
    def save_user(self, user: User) -> None: ...
    def delete_user(self, user_id: str) -> None: ...
    def list_users(
            self, *, role: UserRole | None = None, is_approved: bool | None = None
    ) -> list[User]: ...


class TaskRepo(Protocol):
    def get_task(self, task_id: str) -> Task | None: ...
    def save_task(self, task: Task) -> None: ...
    def delete_task(self, task_id: str) -> None: ...

    def list_tasks(
            self,
            *,
            creator_id: str | None = None,
            assigned_to: str | None = None,
            status: TaskStatus | None = None,
            completed_since: float | None = None,
            order_by: Any = "created_desc",
            limit: int | None = None,
    ) -> list[Task]: ...

    def count_tasks(
            self,
            *,
            creator_id: str | None = None,
            assigned_to: str | None = None,
            status: TaskStatus | None = None,
            completed_since: float | None = None,
    ) -> int: ...


class UnitOfWork(Protocol):
    """Transaction boundary shared by UserRepo and TaskRepo writes."""

    def transaction(self) -> AbstractContextManager[Any]: ...

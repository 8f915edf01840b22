# src/teamtrack/tasks/task_api.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from ..core.errors import NotFound
from ..core.locks import task_key
from ..core.policy import Action, require
from ..core.state import AppState
from ..core.validation import (
    MAX_TITLE_LEN,
    normalize_tags,
    optional_hours,
    optional_text,
    require_text,
)
from ..users.user_api import get_user
from .task_lifecycle import parse_priority, require_assignable, update_task
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

__all__ = ["create_task", "update_task", "delete_task", "get_task", "list_tasks"]


def create_task(
    state: AppState,
    actor_id: str,
    *,
    title: str,
    description: str | None = "",
    assigned_to: str | None = None,
    priority: str | None = None,
    skills: Iterable[str] | None = None,
    actual_hours: float | None = None,
) -> Task:
    """
    Create a pending task owned by the actor.

    Only managers may pre-assign, and only to approved members. A member passing
    assigned_to is rejected with Forbidden; nothing is created.
    """
    title = require_text(title, "title", max_len=MAX_TITLE_LEN)
    description = optional_text(description, "description")
    parsed_priority = parse_priority(priority)
    tags = normalize_tags(skills)
    hours = optional_hours(actual_hours)
    assignee_id = assigned_to.strip() if isinstance(assigned_to, str) and assigned_to.strip() else None

    actor = get_user(state, actor_id)
    require(actor, Action.CREATE_TASK)
    if assignee_id is not None:
        require(actor, Action.ASSIGN_TASK)
        require_assignable(state, assignee_id)

    now = state.now()
    task = Task(
        id=uuid.uuid4().hex,
        title=title,
        description=description,
        status=TaskStatus.PENDING,
        creator_id=actor.id,
        assigned_to=assignee_id,
        actual_hours=hours,
        priority=parsed_priority,
        skills=tags,
        created_at=now,
        updated_at=now,
    )
    state.tasks.save_task(task)
    logger.info("Task created id=%s by=%s assigned_to=%s", task.id, actor.id, assignee_id)
    return task


def delete_task(state: AppState, actor_id: str, task_id: str) -> None:
    actor = get_user(state, actor_id)

    with state.locks.hold(task_key(task_id)):
        task = state.tasks.get_task(task_id)
        if task is None:
            raise NotFound(f"task {task_id} not found")
        require(actor, Action.DELETE_TASK, task)
        state.tasks.delete_task(task_id)

    logger.info("Task deleted id=%s by=%s", task_id, actor.id)


def get_task(state: AppState, actor_id: str, task_id: str) -> Task:
    actor = get_user(state, actor_id)
    task = state.tasks.get_task(task_id)
    if task is None:
        raise NotFound(f"task {task_id} not found")
    require(actor, Action.VIEW_TASK, task)
    return task


def list_tasks(state: AppState, actor_id: str) -> list[Task]:
    """
    Managers: tasks they created. Members: tasks assigned to them.
    Newest first.
    """
    actor = get_user(state, actor_id)
    if actor.is_manager:
        require(actor, Action.LIST_CREATED_TASKS)
        return state.tasks.list_tasks(creator_id=actor.id)
    return state.tasks.list_tasks(assigned_to=actor.id)

# src/teamtrack/tasks/task_lifecycle.py

"""
Task lifecycle manager.

A generic "update task" request carries a partial set of field changes. The
status before the update is compared with the requested status to decide which
edge fired:

- -> completed (from any other status): completed_at = now, credit the assignee
- completed -> pending (reopen): completed_at cleared, debit the assignee
- completed -> in_progress: completed_at cleared, no statistics change
- anything else: status only

Order of work: validate payload -> load actor/task -> authorize -> lock the
assignee -> one transaction that re-checks the stored task, then writes task
fields, aggregates and badges. Nothing is written before every check has passed.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Mapping
from dataclasses import replace
from enum import StrEnum
from typing import Any

from ..core.errors import Conflict, Forbidden, NotFound, ValidationError
from ..core.locks import task_key, user_key
from ..core.policy import Action, require
from ..core.state import AppState
from ..core.validation import (
    MAX_TITLE_LEN,
    normalize_tags,
    optional_hours,
    optional_text,
    require_text,
)
from ..performance import accountant
from ..performance.achievements import apply_earned
from ..users.user_api import get_user
from ..users.user_models import User, UserRole
from .task_models import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)


class Edge(StrEnum):
    NONE = "none"
    COMPLETED = "completed"
    REOPENED = "reopened"
    LEFT_COMPLETED = "left_completed"


CONTENT_FIELDS = frozenset({"title", "description", "status", "actual_hours", "priority", "skills"})

# Explicit per-role whitelist; anything outside it is never merged onto a task.
MUTABLE_FIELDS: dict[UserRole, frozenset[str]] = {
    UserRole.MEMBER: CONTENT_FIELDS,
    UserRole.MANAGER: CONTENT_FIELDS | {"assigned_to"},
}

ALL_FIELDS = frozenset().union(*MUTABLE_FIELDS.values())


def parse_status(raw: Any) -> TaskStatus:
    try:
        return TaskStatus(str(raw).strip().lower())
    except ValueError:
        raise ValidationError(f"invalid status: {raw!r}") from None


def parse_priority(raw: Any) -> TaskPriority | None:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        return TaskPriority(str(raw).strip().lower())
    except ValueError:
        raise ValidationError(f"invalid priority: {raw!r}") from None


def normalize_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Validate and coerce an update payload. Unknown fields are a ValidationError."""
    unknown = sorted(set(changes) - ALL_FIELDS)
    if unknown:
        raise ValidationError(f"unknown or immutable task fields: {', '.join(unknown)}")

    out: dict[str, Any] = {}
    for name, value in changes.items():
        if name == "title":
            out[name] = require_text(value, "title", max_len=MAX_TITLE_LEN)
        elif name == "description":
            out[name] = optional_text(value, "description")
        elif name == "status":
            out[name] = parse_status(value)
        elif name == "actual_hours":
            out[name] = optional_hours(value)
        elif name == "priority":
            out[name] = parse_priority(value)
        elif name == "skills":
            out[name] = normalize_tags(value)
        elif name == "assigned_to":
            out[name] = value.strip() if isinstance(value, str) and value.strip() else None
    return out


def classify_edge(old: TaskStatus, new: TaskStatus) -> Edge:
    if new == TaskStatus.COMPLETED and old != TaskStatus.COMPLETED:
        return Edge.COMPLETED
    if old == TaskStatus.COMPLETED and new == TaskStatus.PENDING:
        return Edge.REOPENED
    if old == TaskStatus.COMPLETED and new != TaskStatus.COMPLETED:
        return Edge.LEFT_COMPLETED
    return Edge.NONE


def require_assignable(state: AppState, assignee_id: str) -> User:
    """Tasks may only be assigned to existing, approved members."""
    assignee = state.users.get_user(assignee_id)
    if assignee is None:
        raise NotFound(f"user {assignee_id} not found")
    if not assignee.is_member or not assignee.is_approved:
        raise Forbidden("assignee_not_approved", "tasks can only be assigned to approved members")
    return assignee


def _authorize(state: AppState, actor: User, task: Task, changes: Mapping[str, Any]) -> None:
    require(actor, Action.UPDATE_TASK, task)

    disallowed = set(changes) - MUTABLE_FIELDS[actor.role]
    if disallowed:
        # Only assigned_to can end up here: it is the one manager-only field.
        require(actor, Action.ASSIGN_TASK, task)

    new_assignee = changes.get("assigned_to")
    if new_assignee is not None and new_assignee != task.assigned_to:
        require_assignable(state, new_assignee)


def update_task(
    state: AppState, actor_id: str, task_id: str, changes: Mapping[str, Any]
) -> Task:
    normalized = normalize_changes(changes)
    actor = get_user(state, actor_id)

    with contextlib.ExitStack() as stack:
        stack.enter_context(state.locks.hold(task_key(task_id)))

        task = state.tasks.get_task(task_id)
        if task is None:
            raise NotFound(f"task {task_id} not found")

        _authorize(state, actor, task, normalized)

        now = state.now()
        old_status = task.status
        new_status = normalized.get("status", old_status)
        edge = classify_edge(old_status, new_status)

        completed_at = task.completed_at
        if edge == Edge.COMPLETED:
            completed_at = now
        elif edge in (Edge.REOPENED, Edge.LEFT_COMPLETED):
            completed_at = None

        updated = replace(task, **normalized, completed_at=completed_at, updated_at=now)

        # Statistics follow the assignee as it stands after the update.
        assignee_id = updated.assigned_to if edge in (Edge.COMPLETED, Edge.REOPENED) else None
        if assignee_id:
            stack.enter_context(state.locks.hold(user_key(assignee_id)))

        with state.db.transaction():
            # BEGIN IMMEDIATE holds the write lock; another process sharing the file
            # may have written the task since it was read above.
            if state.tasks.get_task(task_id) != task:
                raise Conflict(f"task {task_id} was changed concurrently; reload and retry")
            state.tasks.save_task(updated)
            if assignee_id:
                _account(state, assignee_id, updated, edge, now=now)

    logger.info(
        "Task updated id=%s by=%s status=%s->%s edge=%s",
        task_id,
        actor.id,
        old_status.value,
        updated.status.value,
        edge.value,
    )
    return updated


def _account(state: AppState, assignee_id: str, task: Task, edge: Edge, *, now: float) -> None:
    """Aggregate update for one edge, persisted with a single save_user."""
    assignee = state.users.get_user(assignee_id)
    if assignee is None:
        # Assignee removed after assignment: nothing to credit.
        logger.warning("Assignee missing for task=%s user=%s; statistics skipped", task.id, assignee_id)
        return

    if edge == Edge.COMPLETED:
        assignee = accountant.on_task_completed(assignee, task, now=now)
    else:
        assignee = accountant.on_task_reopened(assignee, task, now=now)

    if getattr(state.settings, "auto_award", True):
        assignee, _ = apply_earned(assignee, now=now)

    state.users.save_user(assignee)

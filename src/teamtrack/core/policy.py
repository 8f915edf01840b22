# src/teamtrack/core/policy.py

"""
Authorization policy.

can_perform(actor, action, target) is a pure decision with no side effects.
require(...) turns a denial into Forbidden carrying the reason code.

Rules live in a table (Action -> check) so adding an action never touches
control flow.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..tasks.task_models import Task
from ..users.user_models import User
from .errors import Forbidden


class Action(StrEnum):
    CREATE_TASK = "create_task"
    ASSIGN_TASK = "assign_task"
    UPDATE_TASK = "update_task"
    DELETE_TASK = "delete_task"
    VIEW_TASK = "view_task"
    LIST_CREATED_TASKS = "list_created_tasks"
    LIST_PENDING_MEMBERS = "list_pending_members"
    REVIEW_MEMBER = "review_member"
    LIST_TEAM = "list_team"


@dataclass(slots=True, frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def _deny(code: str) -> Decision:
    return Decision(False, code)


def _approved_manager(actor: User, _target: Any = None) -> Decision:
    if not actor.is_manager:
        return _deny("not_manager")
    if not actor.is_approved:
        return _deny("manager_not_approved")
    return ALLOW


def _manager(actor: User, _target: Any = None) -> Decision:
    return ALLOW if actor.is_manager else _deny("not_manager")


def _anyone(actor: User, _target: Any = None) -> Decision:
    return ALLOW


def _task_party(actor: User, task: Task) -> Decision:
    return ALLOW if task.involves(actor.id) else _deny("not_task_party")


def _task_creator(actor: User, task: Task) -> Decision:
    return ALLOW if task.creator_id == actor.id else _deny("not_task_creator")


def _task_visible(actor: User, task: Task) -> Decision:
    # Members see what is assigned to them; managers see what they created.
    if actor.is_manager:
        return ALLOW if task.creator_id == actor.id else _deny("not_task_creator")
    return ALLOW if task.assigned_to == actor.id else _deny("not_task_assignee")


RULES: dict[Action, Callable[[User, Any], Decision]] = {
    Action.CREATE_TASK: _anyone,
    Action.ASSIGN_TASK: _manager,
    Action.UPDATE_TASK: _task_party,
    Action.DELETE_TASK: _task_creator,
    Action.VIEW_TASK: _task_visible,
    Action.LIST_CREATED_TASKS: _approved_manager,
    Action.LIST_PENDING_MEMBERS: _approved_manager,
    Action.REVIEW_MEMBER: _approved_manager,
    Action.LIST_TEAM: _approved_manager,
}

_REASONS: dict[str, str] = {
    "not_manager": "only managers may do this",
    "manager_not_approved": "manager account is not approved",
    "not_task_party": "only the task creator or assignee may change this task",
    "not_task_creator": "only the task creator may do this",
    "not_task_assignee": "task is not assigned to you",
}


def can_perform(actor: User, action: Action, target: Any = None) -> Decision:
    return RULES[action](actor, target)


def require(actor: User, action: Action, target: Any = None) -> None:
    decision = can_perform(actor, action, target)
    if not decision.allowed:
        code = decision.reason or "denied"
        raise Forbidden(code, _REASONS.get(code, code))

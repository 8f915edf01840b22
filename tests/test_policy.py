# tests/test_policy.py

from __future__ import annotations

import pytest

from teamtrack.core.errors import Forbidden
from teamtrack.core.policy import RULES, Action, can_perform, require
from teamtrack.tasks.task_models import Task, TaskStatus
from teamtrack.users.user_models import User, UserRole


def _user(uid: str, role: UserRole, approved: bool = True) -> User:
    return User(
        id=uid,
        username=uid,
        email=f"{uid}@example.com",
        role=role,
        is_approved=approved,
        created_at=0.0,
        updated_at=0.0,
    )


MANAGER = _user("m1", UserRole.MANAGER)
OTHER_MANAGER = _user("m2", UserRole.MANAGER)
UNAPPROVED_MANAGER = _user("m3", UserRole.MANAGER, approved=False)
ASSIGNEE = _user("u1", UserRole.MEMBER)
STRANGER = _user("u2", UserRole.MEMBER)

TASK = Task(
    id="t1",
    title="Ship it",
    description="",
    status=TaskStatus.PENDING,
    creator_id="m1",
    assigned_to="u1",
    created_at=0.0,
    updated_at=0.0,
)


def test_every_action_has_a_rule() -> None:
    assert set(RULES) == set(Action)


@pytest.mark.parametrize(
    ("actor", "allowed"),
    [(MANAGER, True), (ASSIGNEE, True), (STRANGER, False), (OTHER_MANAGER, False)],
)
def test_update_requires_creator_or_assignee(actor: User, allowed: bool) -> None:
    assert can_perform(actor, Action.UPDATE_TASK, TASK).allowed is allowed


def test_only_creator_may_delete() -> None:
    assert can_perform(MANAGER, Action.DELETE_TASK, TASK)
    decision = can_perform(ASSIGNEE, Action.DELETE_TASK, TASK)
    assert not decision
    assert decision.reason == "not_task_creator"


def test_only_managers_assign() -> None:
    assert can_perform(MANAGER, Action.ASSIGN_TASK)
    assert can_perform(ASSIGNEE, Action.ASSIGN_TASK).reason == "not_manager"


@pytest.mark.parametrize(
    "action",
    [Action.LIST_PENDING_MEMBERS, Action.REVIEW_MEMBER, Action.LIST_TEAM, Action.LIST_CREATED_TASKS],
)
def test_membership_actions_need_an_approved_manager(action: Action) -> None:
    assert can_perform(MANAGER, action)
    assert can_perform(ASSIGNEE, action).reason == "not_manager"
    assert can_perform(UNAPPROVED_MANAGER, action).reason == "manager_not_approved"


def test_visibility_rules() -> None:
    assert can_perform(MANAGER, Action.VIEW_TASK, TASK)
    assert can_perform(ASSIGNEE, Action.VIEW_TASK, TASK)
    assert not can_perform(OTHER_MANAGER, Action.VIEW_TASK, TASK)
    assert can_perform(STRANGER, Action.VIEW_TASK, TASK).reason == "not_task_assignee"


def test_require_raises_forbidden_with_code() -> None:
    with pytest.raises(Forbidden) as excinfo:
        require(STRANGER, Action.UPDATE_TASK, TASK)
    assert excinfo.value.code == "not_task_party"
    assert excinfo.value.kind == "forbidden"
    assert "creator or assignee" in excinfo.value.reason

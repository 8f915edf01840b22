# src/teamtrack/users/user_api.py

"""
Registration and membership operations.

Managers are approved at registration; members wait for a manager. Rejecting
a pending member deletes the record outright.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import replace

from ..core.errors import Conflict, NotFound
from ..core.locks import user_key
from ..core.policy import Action, require
from ..core.state import AppState
from ..core.validation import normalize_email, normalize_tags, require_text
from .user_models import User, UserRole

logger = logging.getLogger(__name__)


def get_user(state: AppState, user_id: str | None) -> User:
    user = state.users.get_user(user_id) if user_id else None
    if user is None:
        raise NotFound(f"user {user_id} not found")
    return user


def register_user(
    state: AppState,
    *,
    username: str,
    email: str,
    role: str | UserRole | None = None,
    skills: Iterable[str] | None = None,
) -> User:
    username = require_text(username, "username")
    email = normalize_email(email)
    parsed_role = UserRole.parse(role)
    tags = normalize_tags(skills)

    if state.users.find_user_by_email(email) is not None:
        raise Conflict(f"email {email} is already registered")
    if state.users.find_user_by_username(username) is not None:
        raise Conflict(f"username {username} is taken")

    now = state.now()
    user = User(
        id=uuid.uuid4().hex,
        username=username,
        email=email,
        role=parsed_role,
        is_approved=parsed_role == UserRole.MANAGER,
        skills=tags,
        created_at=now,
        updated_at=now,
    )
    # The unique columns still guard against a concurrent duplicate (Conflict).
    state.users.save_user(user)
    logger.info(
        "User registered id=%s username=%s role=%s approved=%s",
        user.id,
        user.username,
        user.role.value,
        user.is_approved,
    )
    return user


def list_pending_members(state: AppState, actor_id: str) -> list[User]:
    actor = get_user(state, actor_id)
    require(actor, Action.LIST_PENDING_MEMBERS)
    return state.users.list_users(role=UserRole.MEMBER, is_approved=False)


def list_team_members(state: AppState, actor_id: str) -> list[User]:
    """Approved members only; these are the users a manager may assign tasks to."""
    actor = get_user(state, actor_id)
    require(actor, Action.LIST_TEAM)
    return state.users.list_users(role=UserRole.MEMBER, is_approved=True)


def approve_or_reject_member(
    state: AppState, actor_id: str, member_id: str, *, approve: bool
) -> User | None:
    """
    approve=True  -> is_approved=True, approved_by=actor; returns the updated member
    approve=False -> the member record is deleted; returns None
    """
    actor = get_user(state, actor_id)
    require(actor, Action.REVIEW_MEMBER)

    with state.locks.hold(user_key(member_id)), state.db.transaction():
        member = state.users.get_user(member_id)
        if member is None or not member.is_member:
            raise NotFound(f"member {member_id} not found")
        if member.is_approved:
            raise Conflict(f"member {member.username} is already approved")

        if not approve:
            state.users.delete_user(member.id)
            logger.info("Member rejected id=%s by=%s", member.id, actor.id)
            return None

        updated = replace(member, is_approved=True, approved_by=actor.id, updated_at=state.now())
        state.users.save_user(updated)

    logger.info("Member approved id=%s by=%s", updated.id, actor.id)
    return updated

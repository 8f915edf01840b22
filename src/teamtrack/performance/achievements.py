# src/teamtrack/performance/achievements.py

"""
Achievement evaluator.

Badges are a declarative rule table (condition -> badge). Every rule is evaluated
independently; evaluation is pure and only reports badges the user lacks, so
re-running it never grants the same badge twice.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

from ..core.errors import Conflict, NotFound, ValidationError
from ..core.locks import user_key
from ..core.state import AppState
from ..users.user_models import Achievement, User

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AchievementRule:
    name: str
    description: str
    icon: str
    condition: Callable[[User], bool]


ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule(
        name="First Task",
        description="Completed your first task!",
        icon="🎯",
        condition=lambda u: u.total_tasks_completed >= 1,
    ),
    AchievementRule(
        name="Task Master",
        description="Completed 10 tasks!",
        icon="🏆",
        condition=lambda u: u.total_tasks_completed >= 10,
    ),
    AchievementRule(
        name="Speed Demon",
        description="Average completion time under 2 hours!",
        icon="⚡",
        condition=lambda u: u.average_completion_time <= 2 and u.total_tasks_completed >= 5,
    ),
)


def evaluate(user: User, rules: tuple[AchievementRule, ...] = ACHIEVEMENT_RULES) -> list[AchievementRule]:
    """Rules whose condition holds and whose badge the user does not have yet."""
    return [r for r in rules if r.condition(user) and not user.has_achievement(r.name)]


def grant(user: User, *, name: str, description: str, icon: str, now: float) -> User:
    """Return a copy of `user` with the badge appended. Duplicate names raise Conflict."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("achievement name is required")
    if user.has_achievement(name):
        raise Conflict(f"achievement {name!r} already earned")

    badge = Achievement(name=name, description=description or "", icon=icon or "", earned_at=now)
    return replace(user, achievements=[*user.achievements, badge], updated_at=now)


def apply_earned(user: User, *, now: float) -> tuple[User, list[Achievement]]:
    """Grant every newly earned badge. Used inside an already locked transaction."""
    granted: list[Achievement] = []
    for rule in evaluate(user):
        user = grant(user, name=rule.name, description=rule.description, icon=rule.icon, now=now)
        granted.append(user.achievements[-1])
    if granted:
        logger.info("Achievements granted user=%s names=%s", user.id, [a.name for a in granted])
    return user, granted


def award_if_earned(state: AppState, user_id: str) -> list[Achievement]:
    """Evaluate the rule table for one user and persist any new badges atomically."""
    with state.locks.hold(user_key(user_id)), state.db.transaction():
        user = state.users.get_user(user_id)
        if user is None:
            raise NotFound(f"user {user_id} not found")

        updated, granted = apply_earned(user, now=state.now())
        if granted:
            state.users.save_user(updated)
        return granted


def award_achievement(
    state: AppState, user_id: str, *, name: str, description: str = "", icon: str = ""
) -> Achievement:
    """Grant a named badge explicitly. A second grant of the same name raises Conflict."""
    if not (name or "").strip():
        raise ValidationError("achievement name is required")

    with state.locks.hold(user_key(user_id)), state.db.transaction():
        user = state.users.get_user(user_id)
        if user is None:
            raise NotFound(f"user {user_id} not found")

        updated = grant(user, name=name, description=description, icon=icon, now=state.now())
        state.users.save_user(updated)

    badge = updated.achievements[-1]
    logger.info("Achievement awarded user=%s name=%s", user_id, badge.name)
    return badge

# tests/test_achievements.py

from __future__ import annotations

from dataclasses import replace

import pytest

from teamtrack.core.errors import Conflict, NotFound, ValidationError
from teamtrack.performance.achievements import (
    ACHIEVEMENT_RULES,
    award_achievement,
    award_if_earned,
    evaluate,
    grant,
)
from teamtrack.users.user_models import User, UserRole


def _user(completed: int = 0, avg: float = 0.0) -> User:
    return User(
        id="u1",
        username="umar",
        email="umar@example.com",
        role=UserRole.MEMBER,
        is_approved=True,
        created_at=0.0,
        updated_at=0.0,
        total_tasks_completed=completed,
        average_completion_time=avg,
    )


def _names(rules) -> list[str]:
    return [r.name for r in rules]


def test_rule_table_names_are_unique() -> None:
    names = _names(ACHIEVEMENT_RULES)
    assert len(names) == len(set(names))


@pytest.mark.parametrize(
    ("completed", "avg", "expected"),
    [
        (0, 0.0, []),
        (1, 1.0, ["First Task"]),
        (5, 1.0, ["First Task", "Speed Demon"]),
        (5, 2.5, ["First Task"]),
        (10, 3.0, ["First Task", "Task Master"]),
        (10, 2.0, ["First Task", "Task Master", "Speed Demon"]),
    ],
)
def test_rules_are_evaluated_independently(completed: int, avg: float, expected: list[str]) -> None:
    assert _names(evaluate(_user(completed, avg))) == expected


def test_evaluate_skips_badges_already_held() -> None:
    user = grant(_user(1, 1.0), name="First Task", description="", icon="", now=1.0)
    assert evaluate(user) == []


def test_grant_rejects_duplicates() -> None:
    user = grant(_user(), name="First Task", description="d", icon="i", now=5.0)
    assert user.achievements[0].earned_at == 5.0

    with pytest.raises(Conflict):
        grant(user, name="First Task", description="d", icon="i", now=6.0)


def test_award_if_earned_is_idempotent(state, member) -> None:
    state.users.save_user(replace(member, total_tasks_completed=1, average_completion_time=1.0))

    first = award_if_earned(state, member.id)
    second = award_if_earned(state, member.id)

    assert [a.name for a in first] == ["First Task"]
    assert second == []
    assert [a.name for a in state.users.get_user(member.id).achievements] == ["First Task"]


def test_award_if_earned_unknown_user(state) -> None:
    with pytest.raises(NotFound):
        award_if_earned(state, "missing")


def test_explicit_award_conflicts_on_second_attempt(state, member, clock) -> None:
    badge = award_achievement(state, member.id, name="First Task", description="hi", icon="🎯")
    assert badge.earned_at == clock.now

    with pytest.raises(Conflict):
        award_achievement(state, member.id, name="First Task")

    stored = state.users.get_user(member.id)
    assert [a.name for a in stored.achievements] == ["First Task"]
    assert stored.achievements[0].icon == "🎯"


def test_explicit_award_requires_a_name(state, member) -> None:
    with pytest.raises(ValidationError):
        award_achievement(state, member.id, name=" ")

# tests/test_analytics.py

from __future__ import annotations

import pytest

from teamtrack.core.errors import NotFound
from teamtrack.performance.analytics import DAY_SECONDS, completion_rate, get_analytics
from teamtrack.tasks import task_api


@pytest.mark.parametrize(
    ("completed", "total", "rate"),
    [(0, 0, 0), (0, 3, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 3, 100)],
)
def test_completion_rate_rounds_to_whole_percent(completed: int, total: int, rate: int) -> None:
    assert completion_rate(completed, total) == rate


def test_analytics_for_a_working_member(state, manager, member, clock) -> None:
    old = task_api.create_task(state, manager.id, title="Old", assigned_to=member.id)
    task_api.update_task(state, member.id, old.id, {"status": "completed", "actual_hours": 4})

    clock.advance(20 * DAY_SECONDS)
    recent = task_api.create_task(state, manager.id, title="Recent", assigned_to=member.id)
    task_api.update_task(state, member.id, recent.id, {"status": "completed", "actual_hours": 1})

    clock.advance(1)
    busy = task_api.create_task(state, manager.id, title="Busy", assigned_to=member.id)
    task_api.update_task(state, member.id, busy.id, {"status": "in_progress"})

    clock.advance(1)
    task_api.create_task(state, manager.id, title="Todo", assigned_to=member.id)
    task_api.create_task(state, manager.id, title="Unrelated")

    clock.advance(2 * DAY_SECONDS)
    a = get_analytics(state, member.id)

    assert a.user.username == member.username
    assert a.user.total_tasks_completed == 2
    assert a.user.total_hours_worked == 5
    assert a.user.average_completion_time == 1.0
    assert [b.name for b in a.user.achievements] == ["First Task"]

    assert a.task_stats.total == 4
    assert a.task_stats.completed == 2
    assert a.task_stats.in_progress == 1
    assert a.task_stats.pending == 1
    assert a.task_stats.completion_rate == 50

    # "Old" was completed 22 days ago: inside the month, outside the week.
    assert a.period_stats.weekly_completed == 1
    assert a.period_stats.monthly_completed == 2

    assert [t.title for t in a.recent_tasks] == ["Todo", "Busy", "Recent", "Old"]


def test_recent_tasks_are_limited(state, manager, member, clock) -> None:
    state.settings.recent_tasks_limit = 3
    for i in range(5):
        clock.advance(1)
        task_api.create_task(state, manager.id, title=f"t{i}", assigned_to=member.id)

    a = get_analytics(state, member.id)
    assert [t.title for t in a.recent_tasks] == ["t4", "t3", "t2"]


def test_analytics_for_unknown_user(state) -> None:
    with pytest.raises(NotFound):
        get_analytics(state, "missing")


def test_analytics_grants_badges_already_earned(state, manager, member) -> None:
    state.settings.auto_award = False
    task = task_api.create_task(state, manager.id, title="Quiet", assigned_to=member.id)
    task_api.update_task(state, member.id, task.id, {"status": "completed"})
    assert state.users.get_user(member.id).achievements == []

    peek = get_analytics(state, member.id, award=False)
    assert peek.user.achievements == []

    a = get_analytics(state, member.id)
    assert [b.name for b in a.user.achievements] == ["First Task"]
    assert [b.name for b in state.users.get_user(member.id).achievements] == ["First Task"]

    again = get_analytics(state, member.id)
    assert [b.name for b in again.user.achievements] == ["First Task"]

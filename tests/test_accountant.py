# tests/test_accountant.py

from __future__ import annotations

import pytest

from teamtrack.performance.accountant import on_task_completed, on_task_reopened
from teamtrack.tasks.task_models import Task, TaskStatus
from teamtrack.users.user_models import User, UserRole


def _user(**overrides) -> User:
    base = dict(
        id="u1",
        username="umar",
        email="umar@example.com",
        role=UserRole.MEMBER,
        is_approved=True,
        created_at=0.0,
        updated_at=0.0,
    )
    base.update(overrides)
    return User(**base)


def _task(hours: float | None) -> Task:
    return Task(
        id="t1",
        title="Write report",
        description="",
        status=TaskStatus.COMPLETED,
        creator_id="m1",
        assigned_to="u1",
        actual_hours=hours,
        created_at=0.0,
        updated_at=0.0,
    )


def test_first_completion_sets_all_three_aggregates() -> None:
    user = on_task_completed(_user(), _task(4), now=10.0)
    assert user.total_tasks_completed == 1
    assert user.total_hours_worked == 4
    assert user.average_completion_time == 1.0
    assert user.updated_at == 10.0


def test_running_mean_stays_at_one_hour_whatever_the_logged_hours() -> None:
    user = on_task_completed(_user(), _task(4), now=1.0)
    user = on_task_completed(user, _task(9.5), now=2.0)
    assert user.total_tasks_completed == 2
    assert user.total_hours_worked == pytest.approx(13.5)
    assert user.average_completion_time == pytest.approx(1.0)


def test_running_mean_uses_previous_count_as_weight() -> None:
    # Existing mean of 3.0 over 2 tasks: (3*2 + 1) / 3
    user = on_task_completed(
        _user(total_tasks_completed=2, average_completion_time=3.0), _task(None), now=1.0
    )
    assert user.average_completion_time == pytest.approx(7 / 3)


def test_missing_hours_count_as_zero() -> None:
    user = on_task_completed(_user(total_hours_worked=2.0), _task(None), now=1.0)
    assert user.total_hours_worked == 2.0


def test_reopen_leaves_average_untouched() -> None:
    done = on_task_completed(_user(), _task(3), now=1.0)
    reopened = on_task_reopened(done, _task(3), now=2.0)
    assert reopened.total_tasks_completed == 0
    assert reopened.total_hours_worked == 0
    assert reopened.average_completion_time == done.average_completion_time == 1.0


def test_reopen_is_clamped_at_zero() -> None:
    user = on_task_reopened(_user(total_hours_worked=1.0), _task(5), now=1.0)
    assert user.total_tasks_completed == 0
    assert user.total_hours_worked == 0.0


def test_accountant_does_not_mutate_its_input() -> None:
    original = _user()
    on_task_completed(original, _task(2), now=1.0)
    assert original.total_tasks_completed == 0
    assert original.total_hours_worked == 0.0


@pytest.mark.parametrize(
    "sequence",
    [
        "cccrr",
        "rrc",
        "crcrcrrr",
        "ccccrrrrrrcc",
    ],
)
def test_completed_count_is_net_of_reopens_and_never_negative(sequence: str) -> None:
    user = _user()
    expected = 0
    for step in sequence:
        if step == "c":
            user = on_task_completed(user, _task(1), now=1.0)
            expected += 1
        else:
            user = on_task_reopened(user, _task(1), now=1.0)
            expected = max(0, expected - 1)
        assert user.total_tasks_completed >= 0
        assert user.total_hours_worked >= 0
    assert user.total_tasks_completed == expected

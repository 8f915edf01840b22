# src/teamtrack/performance/analytics.py

"""
Analytics for one user.

Every query first runs the achievement evaluator, so a dashboard fetch grants
badges the user has already earned. The counts themselves are plain reads.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.state import AppState
from ..tasks.task_models import Task, TaskStatus
from ..users.user_api import get_user
from ..users.user_models import Achievement
from .achievements import award_if_earned

DAY_SECONDS = 24 * 60 * 60
WEEK_DAYS = 7
MONTH_DAYS = 30


@dataclass(slots=True, frozen=True)
class UserAggregates:
    username: str
    skills: list[str]
    achievements: list[Achievement]
    total_tasks_completed: int
    total_hours_worked: float
    average_completion_time: float


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    in_progress: int
    completion_rate: int  # percent, rounded


@dataclass(slots=True, frozen=True)
class PeriodStats:
    weekly_completed: int
    monthly_completed: int


@dataclass(slots=True, frozen=True)
class Analytics:
    user: UserAggregates
    task_stats: TaskStats
    period_stats: PeriodStats
    recent_tasks: list[Task]


def completion_rate(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return math.floor(completed / total * 100 + 0.5)


def get_analytics(state: AppState, user_id: str, *, award: bool = True) -> Analytics:
    user = get_user(state, user_id)
    if award and award_if_earned(state, user.id):
        user = get_user(state, user.id)
    tasks = state.tasks
    now = state.now()

    total = tasks.count_tasks(assigned_to=user.id)
    completed = tasks.count_tasks(assigned_to=user.id, status=TaskStatus.COMPLETED)
    pending = tasks.count_tasks(assigned_to=user.id, status=TaskStatus.PENDING)
    in_progress = tasks.count_tasks(assigned_to=user.id, status=TaskStatus.IN_PROGRESS)

    weekly = tasks.count_tasks(
        assigned_to=user.id,
        status=TaskStatus.COMPLETED,
        completed_since=now - WEEK_DAYS * DAY_SECONDS,
    )
    monthly = tasks.count_tasks(
        assigned_to=user.id,
        status=TaskStatus.COMPLETED,
        completed_since=now - MONTH_DAYS * DAY_SECONDS,
    )

    limit = int(getattr(state.settings, "recent_tasks_limit", 10))
    recent = tasks.list_tasks(assigned_to=user.id, order_by="updated_desc", limit=limit)

    return Analytics(
        user=UserAggregates(
            username=user.username,
            skills=list(user.skills),
            achievements=list(user.achievements),
            total_tasks_completed=user.total_tasks_completed,
            total_hours_worked=user.total_hours_worked,
            average_completion_time=user.average_completion_time,
        ),
        task_stats=TaskStats(
            total=total,
            completed=completed,
            pending=pending,
            in_progress=in_progress,
            completion_rate=completion_rate(completed, total),
        ),
        period_stats=PeriodStats(weekly_completed=weekly, monthly_completed=monthly),
        recent_tasks=recent,
    )

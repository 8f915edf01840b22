# src/teamtrack/performance/accountant.py

"""
Performance accountant: per-user aggregates driven by lifecycle edges.

Both functions return a new User value and never touch a store, so the caller
can persist the whole aggregate update with a single save_user inside the
lifecycle transaction.

Completion time is a fixed 1 hour per task; no elapsed time is measured.
Reopening does not reverse average_completion_time.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..tasks.task_models import Task
from ..users.user_models import User

logger = logging.getLogger(__name__)

COMPLETION_TIME_HOURS = 1.0


def on_task_completed(user: User, task: Task, *, now: float) -> User:
    hours = float(task.actual_hours or 0.0)
    completed = user.total_tasks_completed + 1
    average = (user.average_completion_time * (completed - 1) + COMPLETION_TIME_HOURS) / completed

    updated = replace(
        user,
        total_tasks_completed=completed,
        total_hours_worked=user.total_hours_worked + hours,
        average_completion_time=average,
        updated_at=now,
    )
    logger.debug(
        "Credited user=%s task=%s completed=%d hours=%.2f avg=%.3f",
        user.id,
        task.id,
        updated.total_tasks_completed,
        updated.total_hours_worked,
        updated.average_completion_time,
    )
    return updated


def on_task_reopened(user: User, task: Task, *, now: float) -> User:
    hours = float(task.actual_hours or 0.0)
    updated = replace(
        user,
        total_tasks_completed=max(0, user.total_tasks_completed - 1),
        total_hours_worked=max(0.0, user.total_hours_worked - hours),
        updated_at=now,
    )
    logger.debug(
        "Debited user=%s task=%s completed=%d hours=%.2f",
        user.id,
        task.id,
        updated.total_tasks_completed,
        updated.total_hours_worked,
    )
    return updated

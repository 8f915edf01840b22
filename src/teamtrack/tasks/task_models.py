# src/teamtrack/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle status: pending <-> in_progress <-> completed.

    Only two edges have side effects: entering completed and completed -> pending.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    status: TaskStatus
    creator_id: str
    created_at: float
    updated_at: float

    assigned_to: str | None = None
    actual_hours: float | None = None
    priority: TaskPriority | None = None
    skills: list[str] = field(default_factory=list)

    # Set iff status == completed.
    completed_at: float | None = None

    def involves(self, user_id: str) -> bool:
        return self.creator_id == user_id or self.assigned_to == user_id

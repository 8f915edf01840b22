# src/teamtrack/users/user_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from ..core.errors import ValidationError


class UserRole(StrEnum):
    MANAGER = "manager"
    MEMBER = "member"

    @classmethod
    def parse(cls, raw: str | None) -> UserRole:
        if raw is None or not str(raw).strip():
            return cls.MEMBER
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValidationError(f"invalid role: {raw!r} (expected manager or member)") from None


@dataclass(slots=True, frozen=True)
class Achievement:
    name: str
    description: str
    icon: str
    earned_at: float


@dataclass(slots=True)
class User:
    id: str
    username: str
    email: str
    role: UserRole
    is_approved: bool
    created_at: float
    updated_at: float

    approved_by: str | None = None
    skills: list[str] = field(default_factory=list)
    achievements: list[Achievement] = field(default_factory=list)

    total_tasks_completed: int = 0
    total_hours_worked: float = 0.0
    average_completion_time: float = 0.0

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER

    @property
    def is_member(self) -> bool:
        return self.role == UserRole.MEMBER

    def has_achievement(self, name: str) -> bool:
        return any(a.name == name for a in self.achievements)

# src/teamtrack/core/validation.py

"""Input validation helpers. All raise ValidationError; none touch a store."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any

from .errors import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MAX_TITLE_LEN = 200


def require_text(value: Any, field_name: str, *, max_len: int | None = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    text = value.strip()
    if max_len is not None and len(text) > max_len:
        raise ValidationError(f"{field_name} is longer than {max_len} characters")
    return text


def optional_text(value: Any, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value.strip()


def normalize_email(value: Any) -> str:
    email = require_text(value, "email").lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"invalid email: {email!r}")
    return email


def normalize_tags(values: Iterable[Any] | None, field_name: str = "skills") -> list[str]:
    """Trimmed, non-empty, de-duplicated (order kept)."""
    if values is None:
        return []
    if isinstance(values, str):
        raise ValidationError(f"{field_name} must be a list of strings")
    out: list[str] = []
    for v in values:
        if not isinstance(v, str):
            raise ValidationError(f"{field_name} must be a list of strings")
        tag = v.strip()
        if tag and tag not in out:
            out.append(tag)
    return out


def optional_hours(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("actual_hours must be a number")
    hours = float(value)
    if not math.isfinite(hours) or hours < 0:
        raise ValidationError("actual_hours must be a finite, non-negative number")
    return hours

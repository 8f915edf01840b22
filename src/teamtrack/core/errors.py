# src/teamtrack/core/errors.py

"""
Error taxonomy surfaced by the engine.

Every rejection carries a machine-readable `kind` plus a human-readable reason.
Connectors catch TeamTrackError and render `kind: reason`.
"""

from __future__ import annotations


class TeamTrackError(Exception):
    kind = "error"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.kind}: {self.reason}"


class ValidationError(TeamTrackError):
    """Missing or malformed input. Raised before any store access."""

    kind = "validation"


class Forbidden(TeamTrackError):
    """Authorization denial. `code` is a stable reason code (e.g. not_manager)."""

    kind = "forbidden"

    def __init__(self, code: str, reason: str | None = None) -> None:
        super().__init__(reason or code)
        self.code = code


class NotFound(TeamTrackError):
    kind = "not_found"


class Conflict(TeamTrackError):
    """Duplicate achievement name, duplicate unique field, stale membership state."""

    kind = "conflict"


class CollaboratorFailure(TeamTrackError):
    """Store unreachable/erroring or a lock that could not be taken in time. Never retried."""

    kind = "collaborator_failure"

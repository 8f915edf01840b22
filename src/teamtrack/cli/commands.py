# src/teamtrack/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import cast

from ..core.errors import NotFound, TeamTrackError, ValidationError
from ..core.state import AppState
from ..performance.achievements import award_achievement, award_if_earned
from ..performance.analytics import get_analytics
from ..tasks import task_api
from ..tasks.task_models import Task
from ..users import user_api
from ..users.user_models import User

CommandEmitter = Callable[[str], None]


@dataclass(slots=True)
class Session:
    """Who the console is acting as. Credential checks are not part of this app."""

    actor_id: str | None = None


CommandHandler3 = Callable[[AppState, list[str], Session], str]
CommandHandler4 = Callable[[AppState, list[str], Session, CommandEmitter | None], str]
CommandHandler = CommandHandler3 | CommandHandler4

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /task, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        session: Session,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Engine rejections are rendered as "[kind] reason".
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as exc:
            return f"Could not parse command: {exc}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 4

        try:
            if nparams >= 4:
                h4 = cast(CommandHandler4, handler)
                return h4(state, args, session, emit)
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, session)
        except TeamTrackError as exc:
            logger.debug("Command /%s rejected: %s", name, exc)
            return f"[{exc.kind}] {exc.reason}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _ts_local(ts: float | None) -> str:
    if ts is None:
        return "-"
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M")


def _split_options(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """["a", "b", "k=v"] -> (["a", "b"], {"k": "v"})"""
    positional: list[str] = []
    options: dict[str, str] = {}
    for a in args:
        key, sep, value = a.partition("=")
        if sep and key:
            options[key.lower()] = value
        else:
            positional.append(a)
    return positional, options


def _resolve_user(state: AppState, ref: str) -> User:
    user = state.users.find_user_by_username(ref) or state.users.get_user(ref)
    if user is None:
        raise NotFound(f"no user named or with id {ref!r}")
    return user


def _actor(session: Session) -> str:
    if not session.actor_id:
        raise ValidationError("no active user; use /as <username> first")
    return session.actor_id


def _format_user(u: User) -> str:
    flag = "" if u.is_approved else " (pending approval)"
    return f"{u.username} <{u.email}> [{u.role.value}]{flag} id={u.id}"


def _format_task(t: Task) -> str:
    who = f" -> {t.assigned_to}" if t.assigned_to else ""
    hours = f" {t.actual_hours:g}h" if t.actual_hours is not None else ""
    return f"{t.id} [{t.status.value}] {t.title}{who}{hours}"


def _parse_hours(raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"hours must be a number, got {raw!r}") from None


# ---- commands ----


def cmd_help(state: AppState, args: list[str], session: Session) -> str:
    return registry.build_help()


def cmd_register(state: AppState, args: list[str], session: Session) -> str:
    """/register <username> <email> [role=member|manager] [skills=a,b]"""
    positional, opts = _split_options(args)
    if len(positional) < 2:
        return "Usage: /register <username> <email> [role=member|manager] [skills=a,b]"

    skills = [s for s in opts.get("skills", "").split(",") if s.strip()]
    user = user_api.register_user(
        state, username=positional[0], email=positional[1], role=opts.get("role"), skills=skills
    )
    note = "" if user.is_approved else " Waiting for manager approval."
    return f"Registered {_format_user(user)}.{note}"


def cmd_as(state: AppState, args: list[str], session: Session) -> str:
    if not args:
        return "Usage: /as <username|id>"
    user = _resolve_user(state, args[0])
    session.actor_id = user.id
    return f"Now acting as {_format_user(user)}"


def cmd_whoami(state: AppState, args: list[str], session: Session) -> str:
    if not session.actor_id:
        return "No active user. Use /as <username>."
    return _format_user(user_api.get_user(state, session.actor_id))


def cmd_users(state: AppState, args: list[str], session: Session) -> str:
    users = state.users.list_users()
    if not users:
        return "No users registered."
    return "\n".join(["Users:", *(f"  {_format_user(u)}" for u in users)])


def cmd_task(
    state: AppState, args: list[str], session: Session, emit: CommandEmitter | None = None
) -> str:
    """
    /task new "<title>" [desc=...] [to=<user>] [priority=low|medium|high] [skills=a,b]
    /task update <id> [status=...] [hours=N] [title=...] [desc=...] [priority=...] [to=<user>]
    /task show <id>
    /task rm <id>
    """
    usage = (
        "Usage:\n"
        '  /task new "<title>" [desc=...] [to=<user>] [priority=...] [skills=a,b]\n'
        "  /task update <id> [status=pending|in_progress|completed] [hours=N] [title=...] "
        "[desc=...] [priority=...] [to=<user>]\n"
        "  /task show <id>\n"
        "  /task rm <id>"
    )
    if not args:
        return usage

    sub = args[0].lower()
    positional, opts = _split_options(args[1:])
    actor_id = _actor(session)

    if sub == "new":
        if not positional:
            return usage
        to = opts.get("to")
        task = task_api.create_task(
            state,
            actor_id,
            title=" ".join(positional),
            description=opts.get("desc", ""),
            assigned_to=_resolve_user(state, to).id if to else None,
            priority=opts.get("priority"),
            skills=[s for s in opts.get("skills", "").split(",") if s.strip()],
        )
        return f"Created {_format_task(task)}"

    if sub == "update":
        if not positional:
            return usage
        changes: dict[str, object] = {}
        if "status" in opts:
            changes["status"] = opts["status"]
        if "hours" in opts:
            changes["actual_hours"] = _parse_hours(opts["hours"])
        if "title" in opts:
            changes["title"] = opts["title"]
        if "desc" in opts:
            changes["description"] = opts["desc"]
        if "priority" in opts:
            changes["priority"] = opts["priority"]
        if "to" in opts:
            changes["assigned_to"] = _resolve_user(state, opts["to"]).id if opts["to"] else None
        if not changes:
            return "Nothing to update."
        task = task_api.update_task(state, actor_id, positional[0], changes)
        if emit is not None and task.completed_at is not None and changes.get("status"):
            emit(f"Completed at {_ts_local(task.completed_at)}")
        return f"Updated {_format_task(task)}"

    if sub == "show":
        if not positional:
            return usage
        t = task_api.get_task(state, actor_id, positional[0])
        return (
            f"{t.title}\n"
            f"  id: {t.id}\n"
            f"  status: {t.status.value}\n"
            f"  description: {t.description or '-'}\n"
            f"  creator: {t.creator_id}\n"
            f"  assigned to: {t.assigned_to or '-'}\n"
            f"  priority: {t.priority.value if t.priority else '-'}\n"
            f"  skills: {', '.join(t.skills) or '-'}\n"
            f"  hours: {t.actual_hours if t.actual_hours is not None else '-'}\n"
            f"  completed at: {_ts_local(t.completed_at)}"
        )

    if sub in ("rm", "delete"):
        if not positional:
            return usage
        task_api.delete_task(state, actor_id, positional[0])
        return f"Deleted task {positional[0]}"

    return usage


def cmd_tasks(state: AppState, args: list[str], session: Session) -> str:
    tasks = task_api.list_tasks(state, _actor(session))
    if not tasks:
        return "No tasks."
    return "\n".join(["Tasks:", *(f"  {_format_task(t)}" for t in tasks)])


def cmd_team(state: AppState, args: list[str], session: Session) -> str:
    members = user_api.list_team_members(state, _actor(session))
    if not members:
        return "No approved team members."
    return "\n".join(["Team:", *(f"  {_format_user(u)}" for u in members)])


def cmd_pending(state: AppState, args: list[str], session: Session) -> str:
    pending = user_api.list_pending_members(state, _actor(session))
    if not pending:
        return "No pending requests."
    return "\n".join(["Pending members:", *(f"  {_format_user(u)}" for u in pending)])


def cmd_approve(state: AppState, args: list[str], session: Session) -> str:
    if not args:
        return "Usage: /approve <username|id>"
    member = _resolve_user(state, args[0])
    user_api.approve_or_reject_member(state, _actor(session), member.id, approve=True)
    return f"Approved {member.username}."


def cmd_reject(state: AppState, args: list[str], session: Session) -> str:
    if not args:
        return "Usage: /reject <username|id>"
    member = _resolve_user(state, args[0])
    user_api.approve_or_reject_member(state, _actor(session), member.id, approve=False)
    return f"Rejected {member.username}; the registration was removed."


def cmd_stats(state: AppState, args: list[str], session: Session) -> str:
    user_id = _resolve_user(state, args[0]).id if args else _actor(session)
    a = get_analytics(state, user_id)
    lines = [
        f"Performance for {a.user.username}:",
        f"  completed: {a.user.total_tasks_completed}",
        f"  hours worked: {a.user.total_hours_worked:g}",
        f"  avg completion time: {a.user.average_completion_time:.2f}h",
        f"  tasks: {a.task_stats.total} total, {a.task_stats.completed} completed, "
        f"{a.task_stats.in_progress} in progress, {a.task_stats.pending} pending "
        f"({a.task_stats.completion_rate}% done)",
        f"  last 7 days: {a.period_stats.weekly_completed}, "
        f"last 30 days: {a.period_stats.monthly_completed}",
    ]
    if a.user.achievements:
        lines.append("  badges: " + ", ".join(f"{b.icon} {b.name}" for b in a.user.achievements))
    if a.recent_tasks:
        lines.append("  recent:")
        lines.extend(f"    {_format_task(t)}" for t in a.recent_tasks)
    return "\n".join(lines)


def cmd_badges(state: AppState, args: list[str], session: Session) -> str:
    actor_id = _actor(session)
    granted = award_if_earned(state, actor_id)
    user = user_api.get_user(state, actor_id)
    lines = [f"New: {b.icon} {b.name} - {b.description}" for b in granted]
    if user.achievements:
        lines.append("Badges: " + ", ".join(f"{b.icon} {b.name}" for b in user.achievements))
    else:
        lines.append("No badges yet.")
    return "\n".join(lines)


def cmd_award(state: AppState, args: list[str], session: Session) -> str:
    """/award "<name>" [desc=...] [icon=...]  (grants to the active user)"""
    positional, opts = _split_options(args)
    if not positional:
        return 'Usage: /award "<name>" [desc=...] [icon=...]'
    badge = award_achievement(
        state,
        _actor(session),
        name=" ".join(positional),
        description=opts.get("desc", ""),
        icon=opts.get("icon", ""),
    )
    label = f"{badge.icon} {badge.name}" if badge.icon else badge.name
    return f"Achievement awarded: {label}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "register", cmd_register, help_text="Register: /register <username> <email> [role=...] [skills=a,b]."
)
registry.register("as", cmd_as, help_text="Act as a registered user: /as <username|id>.")
registry.register("whoami", cmd_whoami, help_text="Show the active user.")
registry.register("users", cmd_users, help_text="List every registered user.")
registry.register("task", cmd_task, help_text="Tasks: /task new | update | show | rm.")
registry.register("tasks", cmd_tasks, help_text="List the tasks visible to the active user.")
registry.register("team", cmd_team, help_text="Managers: list approved team members.")
registry.register("pending", cmd_pending, help_text="Managers: list members waiting for approval.")
registry.register("approve", cmd_approve, help_text="Managers: approve a pending member.")
registry.register("reject", cmd_reject, help_text="Managers: reject (delete) a pending member.")
registry.register("stats", cmd_stats, help_text="Analytics: /stats [username].")
registry.register("badges", cmd_badges, help_text="Check and grant earned achievements.")
registry.register("award", cmd_award, help_text='Grant a named achievement: /award "<name>".')

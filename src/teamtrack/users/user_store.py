# src/teamtrack/users/user_store.py

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any

from ..core.database import Database, translate_errors
from ..core.errors import NotFound
from .user_models import Achievement, User, UserRole

logger = logging.getLogger(__name__)


class UserStore:
    """
    SQLite identity store.

    Same schema policy as TaskStore: create the table if missing and add any
    missing columns with ALTER TABLE. skills/achievements are JSON columns.

    Uniqueness of email and username is enforced by the schema; a violation
    surfaces as Conflict from save_user.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._ensure_schema()
        try:
            total = len(self.list_users())
        except Exception:
            total = -1
        logger.info("UserStore ready db=%s total=%s", db.path, total)

    def _ensure_schema(self) -> None:
        with translate_errors("ensure users schema"), self._db.connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    username TEXT NOT NULL UNIQUE,
                    email TEXT NOT NULL UNIQUE,
                    role TEXT NOT NULL DEFAULT 'member',
                    is_approved INTEGER NOT NULL DEFAULT 0,
                    approved_by TEXT,
                    skills TEXT NOT NULL DEFAULT '[]',
                    achievements TEXT NOT NULL DEFAULT '[]',
                    total_tasks_completed INTEGER NOT NULL DEFAULT 0,
                    total_hours_worked REAL NOT NULL DEFAULT 0,
                    average_completion_time REAL NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            cur.execute("PRAGMA table_info(users)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE users ADD COLUMN {name} {decl}")
                logger.info("UserStore migration: added column %s", name)

            add_col("approved_by", "TEXT")
            add_col("skills", "TEXT NOT NULL DEFAULT '[]'")
            add_col("achievements", "TEXT NOT NULL DEFAULT '[]'")
            add_col("total_tasks_completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("total_hours_worked", "REAL NOT NULL DEFAULT 0")
            add_col("average_completion_time", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_users_role_approved ON users(role, is_approved)")

    # ---- row mapping ----

    @staticmethod
    def _achievements_to_str(items: list[Achievement]) -> str:
        return json.dumps(
            [
                {"name": a.name, "description": a.description, "icon": a.icon, "earned_at": a.earned_at}
                for a in items
            ],
            ensure_ascii=False,
        )

    @staticmethod
    def _str_to_achievements(s: str | None) -> list[Achievement]:
        if not s:
            return []
        try:
            raw = json.loads(s)
        except ValueError:
            logger.warning("Unreadable achievements column; treating as empty.")
            return []
        out: list[Achievement] = []
        for item in raw if isinstance(raw, list) else []:
            if not isinstance(item, dict) or not item.get("name"):
                continue
            out.append(
                Achievement(
                    name=str(item["name"]),
                    description=str(item.get("description") or ""),
                    icon=str(item.get("icon") or ""),
                    earned_at=float(item.get("earned_at") or 0.0),
                )
            )
        return out

    @staticmethod
    def _str_to_list(s: str | None) -> list[str]:
        if not s:
            return []
        try:
            val = json.loads(s)
        except ValueError:
            return []
        return [str(v) for v in val] if isinstance(val, list) else []

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=str(row["id"]),
            username=str(row["username"]),
            email=str(row["email"]),
            role=UserRole(row["role"]),
            is_approved=bool(row["is_approved"]),
            approved_by=row["approved_by"],
            skills=self._str_to_list(row["skills"]),
            achievements=self._str_to_achievements(row["achievements"]),
            total_tasks_completed=int(row["total_tasks_completed"] or 0),
            total_hours_worked=float(row["total_hours_worked"] or 0.0),
            average_completion_time=float(row["average_completion_time"] or 0.0),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    def _fetch_one(self, op: str, sql: str, params: tuple[Any, ...]) -> User | None:
        with translate_errors(op), self._db.connection() as conn:
            row = conn.execute(sql, params).fetchone()
        return self._row_to_user(row) if row else None

    # ---- public API ----

    def get_user(self, user_id: str) -> User | None:
        return self._fetch_one("get_user", "SELECT * FROM users WHERE id = ?", (user_id,))

    def find_user_by_email(self, email: str) -> User | None:
        return self._fetch_one(
            "find_user_by_email", "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
        )

    def find_user_by_username(self, username: str) -> User | None:
        return self._fetch_one(
            "find_user_by_username", "SELECT * FROM users WHERE username = ?", (username.strip(),)
        )

    def save_user(self, user: User) -> None:
        """Insert or update the whole record in one statement."""
        with translate_errors("save_user"), self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO users(
                    id, username, email, role, is_approved, approved_by,
                    skills, achievements,
                    total_tasks_completed, total_hours_worked, average_completion_time,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    username = excluded.username,
                    email = excluded.email,
                    role = excluded.role,
                    is_approved = excluded.is_approved,
                    approved_by = excluded.approved_by,
                    skills = excluded.skills,
                    achievements = excluded.achievements,
                    total_tasks_completed = excluded.total_tasks_completed,
                    total_hours_worked = excluded.total_hours_worked,
                    average_completion_time = excluded.average_completion_time,
                    updated_at = excluded.updated_at
                """,
                (
                    user.id,
                    user.username,
                    user.email,
                    user.role.value,
                    int(user.is_approved),
                    user.approved_by,
                    json.dumps(user.skills, ensure_ascii=False),
                    self._achievements_to_str(user.achievements),
                    int(user.total_tasks_completed),
                    float(user.total_hours_worked),
                    float(user.average_completion_time),
                    user.created_at,
                    user.updated_at,
                ),
            )
        logger.debug("User saved id=%s role=%s approved=%s", user.id, user.role.value, user.is_approved)

    def delete_user(self, user_id: str) -> None:
        with translate_errors("delete_user"), self._db.connection() as conn:
            cur = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            deleted = cur.rowcount
        if deleted != 1:
            raise NotFound(f"user {user_id} not found")
        logger.debug("User deleted id=%s", user_id)

    def list_users(
        self, *, role: UserRole | None = None, is_approved: bool | None = None
    ) -> list[User]:
        clauses: list[str] = []
        params: list[Any] = []
        if role is not None:
            clauses.append("role = ?")
            params.append(role.value)
        if is_approved is not None:
            clauses.append("is_approved = ?")
            params.append(int(is_approved))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with translate_errors("list_users"), self._db.connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM users {where} ORDER BY created_at ASC, username ASC", params
            ).fetchall()
        return [self._row_to_user(r) for r in rows]

# src/teamtrack/tasks/task_store.py

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Literal

from ..core.database import Database, translate_errors
from ..core.errors import NotFound
from .task_models import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

TaskOrder = Literal["created_desc", "updated_desc"]

_ORDER_SQL: dict[str, str] = {
    "created_desc": "created_at DESC, id ASC",
    "updated_desc": "updated_at DESC, id ASC",
}


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Connections come from the shared Database, so writes made inside
    Database.transaction() commit together with user writes.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except Exception:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", db.path, total)

    def _ensure_schema(self) -> None:
        with translate_errors("ensure tasks schema"), self._db.connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'pending',
                    creator_id TEXT NOT NULL,
                    assigned_to TEXT,
                    actual_hours REAL,
                    priority TEXT,
                    skills TEXT NOT NULL DEFAULT '[]',
                    completed_at REAL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("assigned_to", "TEXT")
            add_col("actual_hours", "REAL")
            add_col("priority", "TEXT")
            add_col("skills", "TEXT NOT NULL DEFAULT '[]'")
            add_col("completed_at", "REAL")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_creator ON tasks(creator_id, created_at)")
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_assignee_status ON tasks(assigned_to, status)"
            )

    @staticmethod
    def _str_to_skills(s: str | None) -> list[str]:
        if not s:
            return []
        try:
            val = json.loads(s)
        except ValueError:
            return []
        return [str(v) for v in val] if isinstance(val, list) else []

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        priority = row["priority"]
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            status=TaskStatus.from_db(row["status"]),
            creator_id=str(row["creator_id"]),
            assigned_to=row["assigned_to"],
            actual_hours=float(row["actual_hours"]) if row["actual_hours"] is not None else None,
            priority=TaskPriority(priority) if priority in set(TaskPriority) else None,
            skills=self._str_to_skills(row["skills"]),
            completed_at=float(row["completed_at"]) if row["completed_at"] is not None else None,
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    @staticmethod
    def _where(
        *,
        creator_id: str | None,
        assigned_to: str | None,
        status: TaskStatus | None,
        completed_since: float | None,
    ) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        if creator_id is not None:
            clauses.append("creator_id = ?")
            params.append(creator_id)
        if assigned_to is not None:
            clauses.append("assigned_to = ?")
            params.append(assigned_to)
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if completed_since is not None:
            clauses.append("completed_at IS NOT NULL AND completed_at >= ?")
            params.append(float(completed_since))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    # ---- public API ----

    def get_task(self, task_id: str) -> Task | None:
        with translate_errors("get_task"), self._db.connection() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return self._row_to_task(row) if row else None

    def save_task(self, task: Task) -> None:
        with translate_errors("save_task"), self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO tasks(
                    id, title, description, status, creator_id, assigned_to,
                    actual_hours, priority, skills, completed_at, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    description = excluded.description,
                    status = excluded.status,
                    assigned_to = excluded.assigned_to,
                    actual_hours = excluded.actual_hours,
                    priority = excluded.priority,
                    skills = excluded.skills,
                    completed_at = excluded.completed_at,
                    updated_at = excluded.updated_at
                """,
                (
                    task.id,
                    task.title,
                    task.description,
                    task.status.value,
                    task.creator_id,
                    task.assigned_to,
                    task.actual_hours,
                    task.priority.value if task.priority else None,
                    json.dumps(task.skills, ensure_ascii=False),
                    task.completed_at,
                    task.created_at,
                    task.updated_at,
                ),
            )
        logger.debug(
            "Task saved id=%s status=%s assigned_to=%s", task.id, task.status.value, task.assigned_to
        )

    def delete_task(self, task_id: str) -> None:
        with translate_errors("delete_task"), self._db.connection() as conn:
            deleted = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,)).rowcount
        if deleted != 1:
            raise NotFound(f"task {task_id} not found")
        logger.debug("Task deleted id=%s", task_id)

    def list_tasks(
        self,
        *,
        creator_id: str | None = None,
        assigned_to: str | None = None,
        status: TaskStatus | None = None,
        completed_since: float | None = None,
        order_by: TaskOrder = "created_desc",
        limit: int | None = None,
    ) -> list[Task]:
        where, params = self._where(
            creator_id=creator_id,
            assigned_to=assigned_to,
            status=status,
            completed_since=completed_since,
        )
        sql = f"SELECT * FROM tasks {where} ORDER BY {_ORDER_SQL[order_by]}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        with translate_errors("list_tasks"), self._db.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_task(r) for r in rows]

    def count_tasks(
        self,
        *,
        creator_id: str | None = None,
        assigned_to: str | None = None,
        status: TaskStatus | None = None,
        completed_since: float | None = None,
    ) -> int:
        where, params = self._where(
            creator_id=creator_id,
            assigned_to=assigned_to,
            status=status,
            completed_since=completed_since,
        )
        with translate_errors("count_tasks"), self._db.connection() as conn:
            (n,) = conn.execute(f"SELECT COUNT(*) FROM tasks {where}", params).fetchone()
        return int(n)

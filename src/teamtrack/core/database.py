# src/teamtrack/core/database.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
from collections.abc import Iterator
from pathlib import Path

from .errors import CollaboratorFailure, Conflict

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def translate_errors(op: str) -> Iterator[None]:
    """Map sqlite3 errors to the engine taxonomy: IntegrityError -> Conflict, rest -> CollaboratorFailure."""
    try:
        yield
    except sqlite3.IntegrityError as exc:
        raise Conflict(f"{op}: {exc}") from exc
    except sqlite3.Error as exc:
        logger.error("Store call failed op=%s err=%s", op, exc)
        raise CollaboratorFailure(f"{op}: {exc}") from exc


class Database:
    """
    Shared SQLite handle for the user and task stores.

    Connection model:
    - outside a transaction, every store call opens its own short-lived connection
    - inside transaction(), the connection is bound to the current thread and every
      store call on that thread joins it, so task and user writes commit together

    sqlite3 errors are surfaced as CollaboratorFailure (chained), never retried here.
    """

    def __init__(self, db_path: str | Path = "teamtrack.sqlite3", *, timeout: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._timeout = float(timeout)
        self._local = threading.local()

    @property
    def path(self) -> Path:
        return self._db_path

    def _open(self) -> sqlite3.Connection:
        # isolation_level=None: we issue BEGIN/COMMIT ourselves.
        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _active(self) -> sqlite3.Connection | None:
        return getattr(self._local, "conn", None)

    @property
    def in_transaction(self) -> bool:
        return self._active() is not None

    @contextlib.contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield the thread's transaction connection, or a fresh autocommit one."""
        active = self._active()
        if active is not None:
            yield active
            return

        try:
            conn = self._open()
        except sqlite3.Error as exc:
            raise CollaboratorFailure(f"database unavailable: {exc}") from exc
        try:
            yield conn
        finally:
            conn.close()

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        One atomic unit: BEGIN IMMEDIATE ... COMMIT, ROLLBACK on any exception.

        Nested calls join the outer transaction.
        """
        active = self._active()
        if active is not None:
            yield active
            return

        try:
            conn = self._open()
        except sqlite3.Error as exc:
            raise CollaboratorFailure(f"database unavailable: {exc}") from exc
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            conn.close()
            raise CollaboratorFailure(f"could not start transaction: {exc}") from exc

        self._local.conn = conn
        try:
            yield conn
        except BaseException:
            with contextlib.suppress(sqlite3.Error):
                conn.execute("ROLLBACK")
            logger.debug("Transaction rolled back db=%s", self._db_path)
            raise
        else:
            try:
                conn.execute("COMMIT")
            except sqlite3.Error as exc:
                with contextlib.suppress(sqlite3.Error):
                    conn.execute("ROLLBACK")
                raise CollaboratorFailure(f"commit failed: {exc}") from exc
        finally:
            self._local.conn = None
            conn.close()

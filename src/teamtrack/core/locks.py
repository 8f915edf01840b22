# src/teamtrack/core/locks.py

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Iterator

from .errors import CollaboratorFailure

logger = logging.getLogger(__name__)


def task_key(task_id: str) -> str:
    return f"task:{task_id}"


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


class KeyedLocks:
    """
    Per-entity mutual exclusion (one lock per "task:<id>" / "user:<id>" key).

    Callers take task locks before user locks. Acquisition is bounded: a lock that
    cannot be taken within `timeout` seconds raises CollaboratorFailure.

    Entries are reference-counted and dropped once nobody holds or waits on them,
    so the map only carries keys that are in use.
    """

    def __init__(self, timeout: float = 10.0) -> None:
        self._timeout = float(timeout)
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # key -> [lock, users]

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextlib.contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._checkout(key)
        try:
            if not lock.acquire(timeout=self._timeout):
                logger.warning("Lock timeout key=%s after %.1fs", key, self._timeout)
                raise CollaboratorFailure(f"timed out waiting for {key}")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(key)

# src/teamtrack/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Everything else receives settings by injection (see cli.bootstrap).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TEAMTRACK"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path

    # ---- Timeouts ----
    db_timeout_seconds: float
    lock_timeout_seconds: float

    # ---- Engine behaviour ----
    auto_award: bool
    recent_tasks_limit: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "teamtrack") or "teamtrack"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/teamtrack"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "teamtrack.sqlite3")

        db_timeout_seconds = _env_float(_k("DB_TIMEOUT_SECONDS"), 30.0)
        lock_timeout_seconds = _env_float(_k("LOCK_TIMEOUT_SECONDS"), 10.0)

        auto_award = _env_bool(_k("AUTO_AWARD"), True)
        recent_tasks_limit = max(1, _env_int(_k("RECENT_TASKS_LIMIT"), 10))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            db_path=db_path,
            db_timeout_seconds=db_timeout_seconds,
            lock_timeout_seconds=lock_timeout_seconds,
            auto_award=auto_award,
            recent_tasks_limit=recent_tasks_limit,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS

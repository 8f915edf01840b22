# src/teamtrack/logging_setup.py

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

# Loggers that narrate every SQL round-trip; console shows only their problems.
_QUIET_LOGGERS = (
    "teamtrack.core.database",
    "teamtrack.tasks.task_store",
    "teamtrack.users.user_store",
)

_LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable while someone types commands:
    - teamtrack logs pass, except store/database chatter below WARNING
    - captured Python warnings and third-party loggers pass only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name in _QUIET_LOGGERS:
            return record.levelno >= logging.WARNING
        if name == "teamtrack" or name.startswith("teamtrack."):
            return True
        return record.levelno >= logging.ERROR


def log_file_name(app_name: str) -> str:
    """'Team Track (dev)' -> 'team-track-dev.log'"""
    slug = re.sub(r"[^a-z0-9]+", "-", (app_name or "").lower()).strip("-")
    return f"{slug or 'teamtrack'}.log"


def setup_logging(
    *,
    app_name: str = "teamtrack",
    log_dir: str | Path = ".local/teamtrack",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route all logging to a filtered stderr console and a full log file named
    after the app inside `log_dir`. Replaces existing root handlers, so call it
    once at startup. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / log_file_name(app_name)

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)

    root.addHandler(console)
    root.addHandler(file_handler)

    # warnings.warn(...) -> 'py.warnings' logger
    logging.captureWarnings(True)
    return log_file

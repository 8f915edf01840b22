# src/teamtrack/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import Session
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def run_console_loop(state: AppState, session: Session | None = None) -> None:
    """Read slash commands from stdin until /exit, EOF or Ctrl+C."""
    session = session or Session()
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "teamtrack"))
    logger.info("Console connector started (%s).", app_name)
    _print_ts(f"[{app_name}] Use /help for commands, /as <username> to pick a user, /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            line = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = command_registry.handle(state, line, session, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Commands start with '/'. Use /help to list them."
        _print_ts(reply)

    logger.info("Console connector finished.")

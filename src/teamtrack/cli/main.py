# src/teamtrack/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console connector in the
main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.errors import TeamTrackError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    app_name = getattr(settings, "app_name", "teamtrack")
    log_file = setup_logging(
        app_name=app_name,
        log_dir=getattr(settings, "data_dir", ".local/teamtrack"),
        console_level=console_level,
    )

    logger.info("Starting %s (log file: %s)...", app_name, log_file)

    try:
        state = create_initial_state(settings=settings)
    except TeamTrackError as exc:
        logger.error("Startup failed: %s", exc)
        raise SystemExit(1) from exc

    if settings.console_enabled:
        run_console_loop(state)
    else:
        logger.info("Console disabled; nothing to run.")

    logger.info("Bye.")


if __name__ == "__main__":
    main()

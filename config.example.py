# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use .env (local, gitignored) for overrides.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TEAMTRACK_APP_NAME": "App display name (default: teamtrack).",
    "TEAMTRACK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "TEAMTRACK_CONSOLE_ENABLED": "Run the console connector (true/false, default: true).",
    # Paths (gitignored)
    "TEAMTRACK_DATA_DIR": "Local data directory for the database and logs (default: .local/teamtrack).",
    "TEAMTRACK_DB_PATH": "SQLite database path (default: <data_dir>/teamtrack.sqlite3).",
    # Timeouts
    "TEAMTRACK_DB_TIMEOUT_SECONDS": "SQLite busy timeout in seconds (default: 30).",
    "TEAMTRACK_LOCK_TIMEOUT_SECONDS": "Max wait for a per-task/per-user lock (default: 10).",
    # Engine
    "TEAMTRACK_AUTO_AWARD": "Grant earned achievements right after each completion/reopen (default: true).",
    "TEAMTRACK_RECENT_TASKS_LIMIT": "Number of recent tasks returned by analytics (default: 10).",
}

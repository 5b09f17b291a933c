# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "LIFETRACK_APP_NAME": "App display name (default: lifetrack).",
    "LIFETRACK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Switches
    "LIFETRACK_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    "LIFETRACK_NOTIFICATIONS_ENABLED": (
        "Grant reminder permission at startup (true/false, default: true). "
        "When false, reminders are computed but never registered."
    ),
    # Reminder delivery
    "LIFETRACK_REMINDER_POLL_SECONDS": "How often due reminders are checked (default: 15, min 0.5).",
    # Paths (gitignored)
    "LIFETRACK_DATA_DIR": "Local data directory for the database and log file (default: .local/lifetrack).",
    "LIFETRACK_TASKS_DB_PATH": "SQLite path for tasks/categories/settings (default: <data_dir>/tasks.sqlite3).",
}

# The reminder lead time is not an env var: it is a persisted user setting.
# Change it from the console with `/lead <minutes>` (unset or non-positive => 60).

# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKPREFS_APP_NAME": "App display name (default: taskprefs).",
    "TASKPREFS_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKPREFS_DATA_DIR": "Local data directory (default: .local/taskprefs).",
    "TASKPREFS_PREFS_DB_PATH": "Preference store SQLite path (default: <data_dir>/user_prefs.sqlite3).",
    "TASKPREFS_LEGACY_PREFS_PATH": (
        "Legacy flat JSON preferences read once for migration "
        "(default: <data_dir>/user_preferences.json)."
    ),
    # Preference store
    "TASKPREFS_STRICT_MIGRATION": (
        "Fail the first store access on a malformed legacy sort_order instead of "
        "falling back to NONE (true/false, default: false)."
    ),
    "TASKPREFS_MAX_UPDATE_RETRIES": "Compare-and-swap attempts per update before giving up (default: 16).",
    # Tasks
    "TASKPREFS_SEED_SAMPLE_TASKS": "Start with the sample task list (true/false, default: true).",
}

# src/taskprefs/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is read from disk at import time except the optional .env file.
- Components take settings by injection; get_settings() is for the composition root only.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKPREFS"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
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

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    prefs_db_path: Path
    legacy_prefs_path: Path

    # ---- Preference store ----
    strict_migration: bool
    max_update_retries: int

    # ---- Tasks ----
    seed_sample_tasks: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskprefs").strip() or "taskprefs"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskprefs"))
        prefs_db_path = _env_path(_k("PREFS_DB_PATH"), data_dir / "user_prefs.sqlite3")
        legacy_prefs_path = _env_path(_k("LEGACY_PREFS_PATH"), data_dir / "user_preferences.json")

        strict_migration = _env_bool(_k("STRICT_MIGRATION"), False)
        # At least one attempt, even with a bogus value in the environment.
        max_update_retries = max(1, _env_int(_k("MAX_UPDATE_RETRIES"), 16))

        seed_sample_tasks = _env_bool(_k("SEED_SAMPLE_TASKS"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            prefs_db_path=prefs_db_path,
            legacy_prefs_path=legacy_prefs_path,
            strict_migration=strict_migration,
            max_update_retries=max_update_retries,
            seed_sample_tasks=seed_sample_tasks,
        )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv(override=False)
    return Settings.from_env()

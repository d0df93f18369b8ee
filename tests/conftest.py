# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskprefs.cli.bootstrap import create_initial_state
from taskprefs.core.state import AppState
from taskprefs.prefs.legacy import DictLegacyPreferences, LegacySortOrderMigration
from taskprefs.prefs.prefs_repository import UserPreferencesRepository
from taskprefs.prefs.prefs_store import PreferenceStore
from taskprefs.tasks.task_models import Task


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskprefs-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        prefs_db_path=tmp_path / "user_prefs.sqlite3",
        legacy_prefs_path=tmp_path / "user_preferences.json",
        strict_migration=False,
        max_update_retries=16,
        seed_sample_tasks=True,
    )


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "prefs.sqlite3"


@pytest.fixture()
def store(db_path: Path) -> PreferenceStore:
    """Real SQLite store with an empty legacy source (sort order migrates to NONE)."""
    return PreferenceStore(
        db_path,
        migrations=[LegacySortOrderMigration(DictLegacyPreferences())],
    )


@pytest.fixture()
def repository(store: PreferenceStore) -> UserPreferencesRepository:
    return UserPreferencesRepository(store)


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    return create_initial_state(settings=settings)


@pytest.fixture()
def example_tasks() -> list[Task]:
    return [
        Task(id=1, name="one", deadline=10, priority=2, completed=False),
        Task(id=2, name="two", deadline=20, priority=1, completed=True),
        Task(id=3, name="three", deadline=20, priority=1, completed=False),
    ]

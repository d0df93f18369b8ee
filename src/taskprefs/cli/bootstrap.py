# src/taskprefs/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- builds exactly one PreferenceStore for the process and wires it into AppState,
- runs the background watcher that keeps the derived task view current.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..core.view_model import TasksViewModel
from ..prefs.legacy import JsonLegacyPreferences, LegacySortOrderMigration
from ..prefs.prefs_repository import UserPreferencesRepository
from ..prefs.prefs_store import PreferenceStore
from ..tasks.task_source import SAMPLE_TASKS, InMemoryTaskSource

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.prefs_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    legacy = JsonLegacyPreferences(settings.legacy_prefs_path)
    store = PreferenceStore(
        settings.prefs_db_path,
        migrations=[LegacySortOrderMigration(legacy)],
        strict_migration=settings.strict_migration,
        max_update_retries=settings.max_update_retries,
    )
    preferences = UserPreferencesRepository(store)
    task_source = InMemoryTaskSource(SAMPLE_TASKS if settings.seed_sample_tasks else ())

    return AppState(
        settings=settings,
        store=store,
        preferences=preferences,
        task_source=task_source,
        view_model=TasksViewModel(task_source, preferences),
    )


async def watch_ui_model(state: AppState) -> None:
    """Keep state.last_ui_model in sync with the derived view. Runs until cancelled."""
    async for model in state.view_model.tasks_ui_model():
        state.last_ui_model = model
        logger.debug(
            "UI model updated: %d tasks sort=%s show_completed=%s counter=%s",
            len(model.tasks),
            model.sort_order.value,
            model.show_completed,
            model.counter,
        )


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown: let pending updates land, then end the streams."""
    try:
        await state.view_model.aclose()
    except Exception:
        logger.exception("Failed to flush pending preference updates.")

    state.task_source.close()
    state.store.close()

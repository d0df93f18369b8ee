# src/taskprefs/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..prefs.prefs_repository import UserPreferencesRepository
from ..prefs.prefs_store import PreferenceStore
from ..tasks.task_source import InMemoryTaskSource
from .view_model import TasksUiModel, TasksViewModel


@dataclass
class AppState:
    # Settings object (real Settings or a SimpleNamespace in tests).
    settings: Any

    store: PreferenceStore
    preferences: UserPreferencesRepository
    task_source: InMemoryTaskSource
    view_model: TasksViewModel

    # Latest derived view, kept current by the background watcher.
    last_ui_model: TasksUiModel | None = None

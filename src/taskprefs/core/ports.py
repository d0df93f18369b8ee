# src/taskprefs/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage and task sources swappable and makes testing easier.
"""

from collections.abc import AsyncIterator, Callable
from typing import Any, Protocol

from ..prefs.prefs_models import UserPreferences

PreferencesTransform = Callable[[UserPreferences], UserPreferences]


class LegacyPreferenceSource(Protocol):
    """Read-only flat key -> string lookup that predates the structured store."""

    def get_string(self, key: str, default: str | None = None) -> str | None: ...


class DataMigration(Protocol):
    """One-time rewrite applied to the stored record before anyone else sees it."""

    name: str

    def should_migrate(self, current: UserPreferences) -> bool: ...
    def migrate(self, current: UserPreferences) -> UserPreferences: ...
    def fallback(self, current: UserPreferences) -> UserPreferences: ...


class TaskSource(Protocol):
    """Whatever owns the task list. The core only subscribes."""

    def subscribe(self) -> AsyncIterator[list[Any]]: ...


class PreferenceRepo(Protocol):
    def user_preferences_stream(self) -> AsyncIterator[UserPreferences]: ...

    async def read(self) -> UserPreferences: ...
    async def update_show_completed(self, completed: bool) -> UserPreferences: ...
    async def increase_counter(self) -> UserPreferences: ...
    async def enable_sort_by_deadline(self, enable: bool) -> UserPreferences: ...
    async def enable_sort_by_priority(self, enable: bool) -> UserPreferences: ...

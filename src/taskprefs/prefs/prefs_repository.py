# src/taskprefs/prefs/prefs_repository.py

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from .errors import MigrationParseError, PreferencesError
from .prefs_models import SortOrder, UserPreferences
from .prefs_store import PreferenceStore

logger = logging.getLogger(__name__)


def sort_order_with_deadline(current: SortOrder, enable: bool) -> SortOrder:
    if enable:
        if current == SortOrder.BY_PRIORITY:
            return SortOrder.BY_DEADLINE_AND_PRIORITY
        return SortOrder.BY_DEADLINE
    if current == SortOrder.BY_DEADLINE_AND_PRIORITY:
        return SortOrder.BY_PRIORITY
    return SortOrder.NONE


def sort_order_with_priority(current: SortOrder, enable: bool) -> SortOrder:
    if enable:
        if current == SortOrder.BY_DEADLINE:
            return SortOrder.BY_DEADLINE_AND_PRIORITY
        return SortOrder.BY_PRIORITY
    if current == SortOrder.BY_DEADLINE_AND_PRIORITY:
        return SortOrder.BY_DEADLINE
    return SortOrder.NONE


class UserPreferencesRepository:
    """
    Saves and exposes user preferences.

    Every update goes through PreferenceStore.update_data and computes the new value
    from the record handed to the transform, never from a cached copy, so a concurrent
    change to another field (or the other sort toggle) is not clobbered.
    """

    def __init__(self, store: PreferenceStore) -> None:
        self._store = store

    @staticmethod
    def _on_read_error(exc: PreferencesError) -> UserPreferences:
        logger.error("Error reading sort order preferences.", exc_info=exc)
        return UserPreferences.DEFAULT

    def user_preferences_stream(self) -> AsyncIterator[UserPreferences]:
        return self._store.subscribe(on_read_error=self._on_read_error)

    async def read(self) -> UserPreferences:
        try:
            return await self._store.read()
        except MigrationParseError:
            raise
        except PreferencesError as e:
            return self._on_read_error(e)

    async def update_show_completed(self, completed: bool) -> UserPreferences:
        return await self._store.update_data(lambda prefs: prefs.with_show_completed(completed))

    async def increase_counter(self) -> UserPreferences:
        return await self._store.update_data(lambda prefs: prefs.with_counter(prefs.counter + 1))

    async def enable_sort_by_deadline(self, enable: bool) -> UserPreferences:
        return await self._store.update_data(
            lambda prefs: prefs.with_sort_order(sort_order_with_deadline(prefs.sort_order, enable))
        )

    async def enable_sort_by_priority(self, enable: bool) -> UserPreferences:
        return await self._store.update_data(
            lambda prefs: prefs.with_sort_order(sort_order_with_priority(prefs.sort_order, enable))
        )

# src/taskprefs/prefs/legacy.py

"""
Legacy flat key-value preferences and the migration that folds them into UserPreferences.

Before the structured store existed, the app kept its settings in a flat file of
string keys to string values. The only key that carries over is "sort_order".
The legacy file is never written to.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import MigrationParseError
from .prefs_models import SortOrder, UserPreferences

if TYPE_CHECKING:
    from ..core.ports import LegacyPreferenceSource

logger = logging.getLogger(__name__)

SORT_ORDER_KEY = "sort_order"


class DictLegacyPreferences:
    """In-memory legacy source (tests, or values already loaded elsewhere)."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values = dict(values or {})

    def get_string(self, key: str, default: str | None = None) -> str | None:
        return self._values.get(key, default)


class JsonLegacyPreferences:
    """
    Legacy source backed by a flat JSON object on disk.

    A missing file means "no legacy data". Non-string values are stringified,
    nested values are ignored.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._cache: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        if self._cache is not None:
            return self._cache
        if not self._path.exists():
            self._cache = {}
            return self._cache
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.exception("Failed to read legacy preferences from %s", self._path)
            self._cache = {}
            return self._cache

        out: dict[str, str] = {}
        if isinstance(data, dict):
            for key, value in data.items():
                if not isinstance(key, str) or isinstance(value, (dict, list)) or value is None:
                    continue
                out[key] = str(value)
        self._cache = out
        logger.debug("Loaded %d legacy preference keys from %s", len(out), self._path)
        return out

    def get_string(self, key: str, default: str | None = None) -> str | None:
        return self._load().get(key, default)


class LegacySortOrderMigration:
    """
    Copy the legacy sort order into a record that has never had one.

    Runs only while sort_order is UNSPECIFIED; once any real value is stored
    the migration is a no-op forever.
    """

    name = "legacy-sort-order"

    def __init__(self, source: LegacyPreferenceSource) -> None:
        self._source = source

    def should_migrate(self, current: UserPreferences) -> bool:
        return current.sort_order == SortOrder.UNSPECIFIED

    def migrate(self, current: UserPreferences) -> UserPreferences:
        if not self.should_migrate(current):
            return current
        raw = self._source.get_string(SORT_ORDER_KEY, SortOrder.NONE.value)
        if raw is None:
            raise MigrationParseError(SORT_ORDER_KEY, raw)
        sort_order = SortOrder.parse(raw, key=SORT_ORDER_KEY)
        if sort_order == SortOrder.UNSPECIFIED:
            # The legacy store never held UNSPECIFIED; keeping it would re-run us forever.
            raise MigrationParseError(SORT_ORDER_KEY, raw)
        return current.with_sort_order(sort_order)

    def fallback(self, current: UserPreferences) -> UserPreferences:
        """Result used by the lenient policy when migrate() raised MigrationParseError."""
        return current.with_sort_order(SortOrder.NONE)

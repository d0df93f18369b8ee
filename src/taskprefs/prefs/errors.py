# src/taskprefs/prefs/errors.py

from __future__ import annotations


class PreferencesError(Exception):
    """Base class for preference store failures."""


class StorageReadError(PreferencesError):
    """The durable preference record could not be read."""


class StorageWriteError(PreferencesError):
    """The durable preference record could not be written."""


class MigrationParseError(PreferencesError, ValueError):
    """A legacy value does not match any known variant."""

    def __init__(self, key: str, raw: str | None) -> None:
        super().__init__(f"Legacy preference {key}={raw!r} is not a known value")
        self.key = key
        self.raw = raw


class ConcurrentUpdateConflict(PreferencesError):
    """
    Raised only when an atomic update lost the compare-and-swap race
    more times than the store allows.
    """


class UnsupportedSortOrder(NotImplementedError):
    """The task filter was handed a sort order it does not know about."""

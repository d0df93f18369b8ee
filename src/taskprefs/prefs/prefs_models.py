# src/taskprefs/prefs/prefs_models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import ClassVar

from .errors import MigrationParseError


class SortOrder(StrEnum):
    """
    How the task list is ordered.

    Notes:
    - values equal the member names; the legacy key-value store saved the name.
    - UNSPECIFIED is what a fresh record holds before the legacy migration ran.
    - deadline and priority are two independent toggles packed into one value;
      the toggle transitions live in prefs_repository.
    """

    UNSPECIFIED = "UNSPECIFIED"
    NONE = "NONE"
    BY_DEADLINE = "BY_DEADLINE"
    BY_PRIORITY = "BY_PRIORITY"
    BY_DEADLINE_AND_PRIORITY = "BY_DEADLINE_AND_PRIORITY"

    @classmethod
    def parse(cls, raw: str | None, *, key: str = "sort_order") -> SortOrder:
        """Strict, exact-match parse used by the legacy migration."""
        if raw is None:
            raise MigrationParseError(key, raw)
        try:
            return cls(raw)
        except ValueError as e:
            raise MigrationParseError(key, raw) from e

    @classmethod
    def from_db(cls, raw: str | None) -> SortOrder:
        if not raw:
            return cls.UNSPECIFIED
        try:
            return cls(raw)
        except ValueError:
            return cls.UNSPECIFIED


@dataclass(frozen=True, slots=True)
class UserPreferences:
    show_completed: bool = False
    sort_order: SortOrder = SortOrder.UNSPECIFIED
    counter: int = 0

    DEFAULT: ClassVar[UserPreferences]

    def __post_init__(self) -> None:
        if self.counter < 0:
            raise ValueError(f"counter must be >= 0, got {self.counter}")

    def with_show_completed(self, show_completed: bool) -> UserPreferences:
        return replace(self, show_completed=bool(show_completed))

    def with_sort_order(self, sort_order: SortOrder) -> UserPreferences:
        return replace(self, sort_order=sort_order)

    def with_counter(self, counter: int) -> UserPreferences:
        return replace(self, counter=int(counter))


UserPreferences.DEFAULT = UserPreferences()

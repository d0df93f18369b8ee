# tests/fakes.py

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from taskprefs.core.stream import StateStream
from taskprefs.prefs.prefs_models import UserPreferences
from taskprefs.prefs.prefs_repository import sort_order_with_deadline, sort_order_with_priority


class FakePreferenceRepo:
    """
    In-memory PreferenceRepo for view-model tests.

    - records every call for assertions
    - can be told to fail the next N updates
    - yields control once per update so concurrent callers really interleave
    """

    def __init__(self, initial: UserPreferences | None = None) -> None:
        self._stream: StateStream[UserPreferences] = StateStream(initial or UserPreferences())
        self.calls: list[tuple[str, object]] = []
        self.fail_next = 0

    @property
    def current(self) -> UserPreferences:
        return self._stream.value

    def user_preferences_stream(self) -> AsyncIterator[UserPreferences]:
        return self._stream.subscribe()

    async def read(self) -> UserPreferences:
        return self.current

    async def _update(self, name: str, arg: object, transform) -> UserPreferences:
        self.calls.append((name, arg))
        await asyncio.sleep(0)
        if self.fail_next > 0:
            self.fail_next -= 1
            raise RuntimeError(f"{name} failed")
        updated = transform(self.current)
        self._stream.emit(updated)
        return updated

    async def update_show_completed(self, completed: bool) -> UserPreferences:
        return await self._update(
            "show_completed", completed, lambda p: p.with_show_completed(completed)
        )

    async def increase_counter(self) -> UserPreferences:
        return await self._update("increase_counter", None, lambda p: p.with_counter(p.counter + 1))

    async def enable_sort_by_deadline(self, enable: bool) -> UserPreferences:
        return await self._update(
            "sort_by_deadline",
            enable,
            lambda p: p.with_sort_order(sort_order_with_deadline(p.sort_order, enable)),
        )

    async def enable_sort_by_priority(self, enable: bool) -> UserPreferences:
        return await self._update(
            "sort_by_priority",
            enable,
            lambda p: p.with_sort_order(sort_order_with_priority(p.sort_order, enable)),
        )


async def next_value(agen, timeout: float = 2.0):
    """Pull one item from an async iterator, failing the test instead of hanging."""
    return await asyncio.wait_for(anext(agen), timeout)

# src/taskprefs/core/view_model.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from ..prefs.prefs_models import SortOrder, UserPreferences
from ..tasks.task_filter import filter_sort_tasks
from ..tasks.task_models import Task
from .ports import PreferenceRepo, TaskSource
from .stream import combine_latest

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TasksUiModel:
    tasks: list[Task]
    show_completed: bool
    sort_order: SortOrder
    counter: int


def build_ui_model(tasks: list[Task], prefs: UserPreferences) -> TasksUiModel:
    return TasksUiModel(
        tasks=filter_sort_tasks(tasks, prefs.show_completed, prefs.sort_order),
        show_completed=prefs.show_completed,
        sort_order=prefs.sort_order,
        counter=prefs.counter,
    )


class TasksViewModel:
    """
    Glue between the task list, the preferences and whoever renders them.

    Every time the task list or the preferences emit, the visible list is rebuilt.
    Mutations are fire-and-forget: each one is launched as an asyncio task and the task
    is returned so callers that care can await completion. Mutations launched one after
    another run in that order.
    """

    def __init__(self, tasks: TaskSource, preferences: PreferenceRepo) -> None:
        self._tasks = tasks
        self._preferences = preferences
        self._pending: set[asyncio.Task[Any]] = set()
        self._last: asyncio.Task[Any] | None = None

    def tasks_ui_model(self) -> AsyncIterator[TasksUiModel]:
        return combine_latest(
            self._tasks.subscribe(),
            self._preferences.user_preferences_stream(),
            build_ui_model,
        )

    def _launch(self, name: str, op: Callable[[], Awaitable[UserPreferences]]) -> asyncio.Task[Any]:
        previous = self._last

        async def run() -> UserPreferences | None:
            if previous is not None and not previous.done():
                # Failures of the previous update are logged by its own task.
                await asyncio.wait([previous])
            try:
                return await op()
            except Exception:
                logger.exception("Preference update %s failed", name)
                return None

        task = asyncio.create_task(run(), name=f"prefs:{name}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        self._last = task
        return task

    def show_completed_tasks(self, show: bool) -> asyncio.Task[Any]:
        return self._launch("show_completed", lambda: self._preferences.update_show_completed(show))

    def increase_counter(self) -> asyncio.Task[Any]:
        return self._launch("increase_counter", self._preferences.increase_counter)

    def enable_sort_by_deadline(self, enable: bool) -> asyncio.Task[Any]:
        return self._launch(
            "sort_by_deadline", lambda: self._preferences.enable_sort_by_deadline(enable)
        )

    def enable_sort_by_priority(self, enable: bool) -> asyncio.Task[Any]:
        return self._launch(
            "sort_by_priority", lambda: self._preferences.enable_sort_by_priority(enable)
        )

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def aclose(self) -> None:
        """Wait for every launched update to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

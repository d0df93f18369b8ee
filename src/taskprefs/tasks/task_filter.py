# src/taskprefs/tasks/task_filter.py

from __future__ import annotations

from collections.abc import Iterable

from ..prefs.errors import UnsupportedSortOrder
from ..prefs.prefs_models import SortOrder
from .task_models import Task


def filter_sort_tasks(
    tasks: Iterable[Task],
    show_completed: bool,
    sort_order: SortOrder,
) -> list[Task]:
    """
    Task list as the user wants to see it.

    - show_completed=False hides completed tasks
    - BY_DEADLINE: latest deadline first
    - BY_PRIORITY: lowest priority value first
    - BY_DEADLINE_AND_PRIORITY: latest deadline first, then lowest priority value

    All sorts are stable: ties keep their input order.
    """
    if show_completed:
        filtered = list(tasks)
    else:
        filtered = [t for t in tasks if not t.completed]

    if sort_order in (SortOrder.UNSPECIFIED, SortOrder.NONE):
        return filtered
    if sort_order == SortOrder.BY_DEADLINE:
        return sorted(filtered, key=lambda t: t.deadline, reverse=True)
    if sort_order == SortOrder.BY_PRIORITY:
        return sorted(filtered, key=lambda t: t.priority)
    if sort_order == SortOrder.BY_DEADLINE_AND_PRIORITY:
        # Two stable passes: secondary key first, then primary.
        by_priority = sorted(filtered, key=lambda t: t.priority)
        return sorted(by_priority, key=lambda t: t.deadline, reverse=True)

    # We shouldn't get any other values
    raise UnsupportedSortOrder(f"{sort_order} not supported")

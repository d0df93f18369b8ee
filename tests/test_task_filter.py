# tests/test_task_filter.py

from __future__ import annotations

import pytest

from taskprefs.prefs.errors import UnsupportedSortOrder
from taskprefs.prefs.prefs_models import SortOrder
from taskprefs.tasks.task_filter import filter_sort_tasks
from taskprefs.tasks.task_models import Task, TaskPriority
from taskprefs.tasks.task_source import SAMPLE_TASKS


def _ids(tasks: list[Task]) -> list[int]:
    return [t.id for t in tasks]


def test_hides_completed_tasks_for_every_sort_order() -> None:
    for order in SortOrder:
        out = filter_sort_tasks(SAMPLE_TASKS, False, order)
        assert out, order
        assert not any(t.completed for t in out), order


def test_show_completed_keeps_everything_in_input_order() -> None:
    out = filter_sort_tasks(SAMPLE_TASKS, True, SortOrder.NONE)
    assert _ids(out) == _ids(list(SAMPLE_TASKS))

    out_unspecified = filter_sort_tasks(SAMPLE_TASKS, True, SortOrder.UNSPECIFIED)
    assert _ids(out_unspecified) == _ids(list(SAMPLE_TASKS))


def test_does_not_mutate_input() -> None:
    tasks = list(SAMPLE_TASKS)
    filter_sort_tasks(tasks, True, SortOrder.BY_DEADLINE_AND_PRIORITY)
    assert tasks == list(SAMPLE_TASKS)


def test_by_deadline_latest_first_and_stable() -> None:
    tasks = [
        Task(1, "a", 5, 3),
        Task(2, "b", 9, 1),
        Task(3, "c", 5, 1),
        Task(4, "d", 9, 2),
    ]
    out = filter_sort_tasks(tasks, True, SortOrder.BY_DEADLINE)
    # Equal deadlines keep input order (priority is ignored here).
    assert _ids(out) == [2, 4, 1, 3]


def test_by_priority_ascending_and_stable() -> None:
    tasks = [
        Task(1, "a", 1, TaskPriority.LOW),
        Task(2, "b", 2, TaskPriority.HIGH),
        Task(3, "c", 3, TaskPriority.LOW),
        Task(4, "d", 4, TaskPriority.HIGH),
        Task(5, "e", 5, TaskPriority.MEDIUM),
    ]
    out = filter_sort_tasks(tasks, True, SortOrder.BY_PRIORITY)
    assert _ids(out) == [2, 4, 5, 1, 3]


def test_by_deadline_and_priority_tiebreaks() -> None:
    tasks = [
        Task(1, "a", 10, 2),
        Task(2, "b", 20, 3),
        Task(3, "c", 20, 1),
        Task(4, "d", 20, 3),
        Task(5, "e", 10, 1),
    ]
    out = filter_sort_tasks(tasks, True, SortOrder.BY_DEADLINE_AND_PRIORITY)
    # deadline desc, then priority asc, then input order (2 before 4).
    assert _ids(out) == [3, 2, 4, 5, 1]


def test_end_to_end_example(example_tasks: list[Task]) -> None:
    out = filter_sort_tasks(example_tasks, False, SortOrder.BY_DEADLINE_AND_PRIORITY)
    assert _ids(out) == [3, 1]


def test_sample_tasks_with_datetimes() -> None:
    out = filter_sort_tasks(SAMPLE_TASKS, False, SortOrder.BY_DEADLINE_AND_PRIORITY)
    # 2020-07-03 x3 (HIGH, LOW, MEDIUM -> 7, 1, 5), then 06-03, 05-03, 04-03.
    assert _ids(out) == [7, 5, 1, 4, 3, 6]


def test_empty_list() -> None:
    assert filter_sort_tasks([], False, SortOrder.BY_PRIORITY) == []


def test_unknown_sort_order_is_a_defect() -> None:
    with pytest.raises(UnsupportedSortOrder):
        filter_sort_tasks(SAMPLE_TASKS, True, "SIDEWAYS")  # type: ignore[arg-type]

    # Also a NotImplementedError, so generic handlers classify it as a programming error.
    with pytest.raises(NotImplementedError):
        filter_sort_tasks([], True, None)  # type: ignore[arg-type]

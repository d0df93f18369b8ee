# tests/test_view_model.py

from __future__ import annotations

import asyncio

import pytest

from taskprefs.core.view_model import TasksUiModel, TasksViewModel, build_ui_model
from taskprefs.prefs.prefs_models import SortOrder, UserPreferences
from taskprefs.prefs.prefs_repository import UserPreferencesRepository
from taskprefs.tasks.task_models import Task
from taskprefs.tasks.task_source import InMemoryTaskSource

from .fakes import FakePreferenceRepo, next_value


def test_build_ui_model(example_tasks: list[Task]) -> None:
    prefs = UserPreferences(show_completed=False, sort_order=SortOrder.BY_DEADLINE_AND_PRIORITY, counter=4)
    model = build_ui_model(example_tasks, prefs)
    assert model == TasksUiModel(
        tasks=[example_tasks[2], example_tasks[0]],
        show_completed=False,
        sort_order=SortOrder.BY_DEADLINE_AND_PRIORITY,
        counter=4,
    )


@pytest.mark.asyncio
async def test_ui_model_recomputes_on_either_source(
    example_tasks: list[Task], repository: UserPreferencesRepository
) -> None:
    source = InMemoryTaskSource(example_tasks)
    vm = TasksViewModel(source, repository)
    models = vm.tasks_ui_model()

    first = await next_value(models)
    assert [t.id for t in first.tasks] == [1, 3]
    assert first.sort_order == SortOrder.NONE

    await vm.enable_sort_by_deadline(True)
    second = await next_value(models)
    assert second.sort_order == SortOrder.BY_DEADLINE
    assert [t.id for t in second.tasks] == [3, 1]

    # Task list changes: recombined with the latest preferences.
    source.set_tasks([*example_tasks, Task(4, "four", 30, 5)])
    third = await next_value(models)
    assert third.sort_order == SortOrder.BY_DEADLINE
    assert [t.id for t in third.tasks] == [4, 3, 1]

    await vm.show_completed_tasks(True)
    fourth = await next_value(models)
    assert fourth.show_completed is True
    assert [t.id for t in fourth.tasks] == [4, 2, 3, 1]

    await vm.increase_counter()
    fifth = await next_value(models)
    assert fifth.counter == 1

    await models.aclose()
    await vm.aclose()


@pytest.mark.asyncio
async def test_updates_apply_in_issue_order() -> None:
    repo = FakePreferenceRepo(UserPreferences(sort_order=SortOrder.NONE))
    vm = TasksViewModel(InMemoryTaskSource(), repo)

    launched = [
        vm.enable_sort_by_deadline(True),
        vm.enable_sort_by_priority(True),
        vm.enable_sort_by_deadline(False),
        vm.enable_sort_by_priority(False),
    ]
    results = await asyncio.gather(*launched)
    assert [r.sort_order for r in results] == [
        SortOrder.BY_DEADLINE,
        SortOrder.BY_DEADLINE_AND_PRIORITY,
        SortOrder.BY_PRIORITY,
        SortOrder.NONE,
    ]
    assert [name for name, _ in repo.calls] == [
        "sort_by_deadline",
        "sort_by_priority",
        "sort_by_deadline",
        "sort_by_priority",
    ]


@pytest.mark.asyncio
async def test_fire_and_forget_increments(repository: UserPreferencesRepository) -> None:
    vm = TasksViewModel(InMemoryTaskSource(), repository)
    for _ in range(10):
        vm.increase_counter()
    assert vm.pending_count == 10
    await vm.aclose()
    assert vm.pending_count == 0
    assert (await repository.read()).counter == 10


@pytest.mark.asyncio
async def test_failed_update_is_logged_not_raised(caplog) -> None:
    repo = FakePreferenceRepo()
    repo.fail_next = 1
    vm = TasksViewModel(InMemoryTaskSource(), repo)

    with caplog.at_level("ERROR"):
        failed = vm.increase_counter()
        ok = vm.increase_counter()
        assert await failed is None
        assert (await ok).counter == 1
    assert "Preference update increase_counter failed" in caplog.text

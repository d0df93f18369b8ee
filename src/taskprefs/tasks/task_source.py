# src/taskprefs/tasks/task_source.py

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from datetime import datetime

from ..core.stream import StateStream
from .task_models import Task, TaskPriority

logger = logging.getLogger(__name__)

SAMPLE_TASKS: tuple[Task, ...] = (
    Task(1, "Open codelab", datetime(2020, 7, 3), TaskPriority.LOW),
    Task(2, "Import project", datetime(2020, 4, 3), TaskPriority.MEDIUM, completed=True),
    Task(3, "Check out the code", datetime(2020, 5, 3), TaskPriority.LOW),
    Task(4, "Read about DataStore", datetime(2020, 6, 3), TaskPriority.HIGH),
    Task(5, "Implement each step", datetime(2020, 7, 3), TaskPriority.MEDIUM),
    Task(6, "Understand how to use DataStore", datetime(2020, 4, 3), TaskPriority.HIGH),
    Task(7, "Understand how to migrate to DataStore", datetime(2020, 7, 3), TaskPriority.HIGH),
)


class InMemoryTaskSource:
    """Holds the current task list and streams every replacement of it."""

    def __init__(self, tasks: Iterable[Task] | None = None) -> None:
        self._stream: StateStream[list[Task]] = StateStream(list(tasks or ()))

    @property
    def tasks(self) -> list[Task]:
        return list(self._stream.value)

    def subscribe(self) -> AsyncIterator[list[Task]]:
        return self._stream.subscribe()

    def set_tasks(self, tasks: Iterable[Task]) -> None:
        new_tasks = list(tasks)
        logger.debug("Task list replaced (%d tasks)", len(new_tasks))
        self._stream.emit(new_tasks)

    def set_completed(self, task_id: int, completed: bool) -> bool:
        """Flip one task's completed flag. Returns False if there is no such task."""
        current = self.tasks
        for i, task in enumerate(current):
            if task.id == task_id:
                if task.completed == completed:
                    return True
                current[i] = Task(task.id, task.name, task.deadline, task.priority, completed)
                self.set_tasks(current)
                return True
        return False

    def close(self) -> None:
        self._stream.close()

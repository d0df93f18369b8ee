# src/taskprefs/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum


class TaskPriority(IntEnum):
    """Lower value sorts first: HIGH before MEDIUM before LOW."""

    HIGH = 1
    MEDIUM = 2
    LOW = 3


@dataclass(frozen=True, slots=True)
class Task:
    id: int
    name: str
    deadline: datetime | float
    priority: TaskPriority | int
    completed: bool = False

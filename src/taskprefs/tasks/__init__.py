"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskPriority)
- task_source.py: in-memory task list with a live stream
- task_filter.py: filter/sort of the task list for display
"""

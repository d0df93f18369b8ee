"""Reactive user preferences for a task list: durable store, legacy migration, derived view."""

__version__ = "0.1.0"

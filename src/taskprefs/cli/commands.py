# src/taskprefs/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from ..core.state import AppState
from ..core.view_model import TasksUiModel, build_ui_model
from ..prefs.prefs_models import UserPreferences

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /show, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_switch(args: list[str]) -> bool | None:
    if not args:
        return None
    arg = args[0].lower()
    if arg in _ON:
        return True
    if arg in _OFF:
        return False
    return None


def _fmt_deadline(deadline) -> str:
    strftime = getattr(deadline, "strftime", None)
    if strftime is not None:
        return strftime("%Y-%m-%d")
    return str(deadline)


def render_ui_model(model: TasksUiModel) -> str:
    lines = [
        f"Sort: {model.sort_order.value}  Show completed: {'ON' if model.show_completed else 'OFF'}"
        f"  Counter: {model.counter}",
    ]
    if not model.tasks:
        lines.append("  (no tasks)")
    for task in model.tasks:
        mark = "x" if task.completed else " "
        priority = getattr(task.priority, "name", str(task.priority))
        lines.append(
            f"  [{mark}] #{task.id} {task.name} (due {_fmt_deadline(task.deadline)}, {priority})"
        )
    return "\n".join(lines)


def _render_prefs(prefs: UserPreferences) -> str:
    return (
        "Preferences:\n"
        f"  show_completed: {prefs.show_completed}\n"
        f"  sort_order: {prefs.sort_order.value}\n"
        f"  counter: {prefs.counter}"
    )


async def _apply(pending) -> str:
    prefs = await pending
    if prefs is None:
        return "Update failed (see log)."
    return _render_prefs(prefs)


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_show(state: AppState, args: list[str]) -> str:
    model = state.last_ui_model
    if model is None:
        # Watcher not running (or not caught up yet): derive a one-off view.
        prefs = await state.preferences.read()
        model = build_ui_model(state.task_source.tasks, prefs)
    return render_ui_model(model)


async def cmd_prefs(state: AppState, args: list[str]) -> str:
    return _render_prefs(await state.preferences.read())


async def cmd_completed(state: AppState, args: list[str]) -> str:
    """
    /completed on   -> show completed tasks
    /completed off  -> hide completed tasks
    """
    enable = _parse_switch(args)
    if enable is None:
        return "Usage: /completed on | /completed off."
    return await _apply(state.view_model.show_completed_tasks(enable))


async def cmd_deadline(state: AppState, args: list[str]) -> str:
    enable = _parse_switch(args)
    if enable is None:
        return "Usage: /deadline on | /deadline off."
    return await _apply(state.view_model.enable_sort_by_deadline(enable))


async def cmd_priority(state: AppState, args: list[str]) -> str:
    enable = _parse_switch(args)
    if enable is None:
        return "Usage: /priority on | /priority off."
    return await _apply(state.view_model.enable_sort_by_priority(enable))


async def cmd_inc(state: AppState, args: list[str]) -> str:
    return await _apply(state.view_model.increase_counter())


async def cmd_done(state: AppState, args: list[str]) -> str:
    """
    /done <id>        -> mark task completed
    /done <id> off    -> mark task not completed
    """
    if not args:
        return "Usage: /done <task id> [on|off]."
    try:
        task_id = int(args[0])
    except ValueError:
        return f"Not a task id: {args[0]}"
    completed = _parse_switch(args[1:])
    if completed is None:
        completed = True
    if not state.task_source.set_completed(task_id, completed):
        return f"No task with id {task_id}."
    logger.debug("Task %s completed=%s", task_id, completed)
    return f"Task #{task_id} marked {'done' if completed else 'not done'}."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("show", cmd_show, help_text="Show the task list with current preferences.", aliases=["ls"])
registry.register("prefs", cmd_prefs, help_text="Show stored preferences.")
registry.register("completed", cmd_completed, help_text="Show/hide completed tasks: /completed on | off.")
registry.register("deadline", cmd_deadline, help_text="Sort by deadline: /deadline on | off.")
registry.register("priority", cmd_priority, help_text="Sort by priority: /priority on | off.")
registry.register("inc", cmd_inc, help_text="Increase the counter.")
registry.register("done", cmd_done, help_text="Mark a task done: /done <id> [on|off].")

# src/lifetrack/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import shlex
from collections.abc import Callable
from dataclasses import replace
from datetime import date
from typing import cast

from ..core.state import AppState
from ..tasks.task_api import (
    add_simple_task,
    new_task,
    parse_due_date,
    parse_due_time,
    resolve_task_ref,
)
from ..tasks.task_models import Priority, Task
from ..tasks.task_query import StatusFilter, group_upcoming, query_tasks

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

# Presentation mapping kept out of the core models.
PRIORITY_MARKERS: dict[Priority, str] = {
    Priority.HIGH: "!!!",
    Priority.MEDIUM: "!!",
    Priority.LOW: "!",
}
FILTER_LABELS: dict[StatusFilter, str] = {
    StatusFilter.ALL: "All tasks",
    StatusFilter.ACTIVE: "Active",
    StatusFilter.TODAY: "Today",
    StatusFilter.UPCOMING: "Upcoming",
    StatusFilter.COMPLETED: "Completed",
    StatusFilter.DELETED: "Deleted",
}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

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

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValueError as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _split_options(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Separate key=value options from positional words."""
    words: list[str] = []
    opts: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key and key.isidentifier():
            opts[key.lower()] = value
        else:
            words.append(arg)
    return words, opts


def _format_due(task: Task) -> str:
    if task.due_date is None:
        return ""
    if task.due_time is None:
        return task.due_date.isoformat()
    return f"{task.due_date.isoformat()} {task.due_time.strftime('%H:%M')}"


def format_task_line(pos: int, task: Task) -> str:
    check = "x" if task.is_completed else " "
    marker = PRIORITY_MARKERS.get(task.priority, "")
    details = [task.category]
    due = _format_due(task)
    if due:
        details.append(f"due {due}")
    if task.deleted_date is not None:
        details.append(f"deleted {task.deleted_date.strftime('%Y-%m-%d')}")
    return f"{pos:>3}. [{check}] {marker:<3} {task.title}  ({', '.join(details)})  #{task.id[:8]}"


def _render(state: AppState, header: str, tasks: list[Task]) -> str:
    state.last_view = list(tasks)
    if not tasks:
        return f"{header}: no tasks."
    lines = [f"{header} ({len(tasks)}):"]
    lines.extend(format_task_line(i, t) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


def _apply_options(task: Task, opts: dict[str, str], *, today: date | None = None) -> Task:
    changes: dict[str, object] = {}
    if "title" in opts:
        changes["title"] = opts["title"]
    if "due" in opts:
        raw = opts["due"].strip().lower()
        changes["due_date"] = None if raw in ("", "none") else parse_due_date(raw, today=today)
        if changes["due_date"] is None:
            changes["due_time"] = None
    if "time" in opts:
        raw = opts["time"].strip().lower()
        changes["due_time"] = None if raw in ("", "none") else parse_due_time(raw)
    if "priority" in opts or "p" in opts:
        changes["priority"] = Priority.parse(opts.get("priority", opts.get("p")))
    if "category" in opts or "cat" in opts:
        changes["category"] = opts.get("category", opts.get("cat", "")).strip() or task.category
    if "notes" in opts:
        changes["notes"] = opts["notes"]
    return replace(task, **changes) if changes else task


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.tasks
    counts = [
        f"  {FILTER_LABELS[f]}: {len(query_tasks(tasks, f))}" for f in StatusFilter
    ]
    pending = len(state.scheduler.pending())
    return (
        "Status:\n"
        + "\n".join(counts)
        + f"\n  Pending reminders: {pending}"
        + f"\n  Reminder lead time: {state.scheduler.lead_minutes():g} min"
        + f"\n  Database: {state.database.path}"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> [due=YYYY-MM-DD|today|tomorrow|+N] [time=HH:MM]
                 [priority=low|medium|high] [category=Name] [notes="..."]
    /add <title> in=<minutes>   -> due N minutes from now
    """
    words, opts = _split_options(args)
    title = " ".join(words).strip()
    if not title:
        return "Usage: /add <title> [due=...] [time=HH:MM] [priority=...] [category=...] [notes=...]"

    if "in" in opts:
        try:
            minutes = int(opts["in"])
        except ValueError:
            raise ValueError(f"bad minutes {opts['in']!r}") from None
        task = add_simple_task(
            state,
            title,
            due_in_minutes=minutes,
            priority=opts.get("priority", opts.get("p", Priority.MEDIUM)),
            category=opts.get("category", opts.get("cat", "Personal")),
            notes=opts.get("notes", ""),
        )
    else:
        task = state.task_store.add(_apply_options(new_task(title), opts))

    if task.category not in state.categories:
        logger.debug("Task %s uses unregistered category %r", task.id, task.category)
    return f"Added: {task.title}  #{task.id[:8]}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <ref> key=value ... (title, due, time, priority, category, notes)"""
    words, opts = _split_options(args)
    if not words or not opts:
        return "Usage: /edit <n|id> title=... due=... time=... priority=... category=... notes=..."

    task = resolve_task_ref(state, words[0])
    if task is None:
        return f"No task matches {words[0]!r}."

    updated = _apply_options(task, opts)
    if not state.task_store.update(updated):
        return "Task no longer exists."
    return f"Updated: {updated.title}  #{updated.id[:8]}"


def cmd_list(state: AppState, args: list[str]) -> str:
    """/list [all|active|today|upcoming|completed|deleted] [category=Name] [search=text]"""
    words, opts = _split_options(args)
    status = StatusFilter.parse(words[0] if words else None)
    category = opts.get("category", opts.get("cat")) or None
    search = opts.get("search", "")

    tasks = query_tasks(state.task_store.tasks, status, category, search)
    header = FILTER_LABELS[status]
    if category:
        header += f" / {category}"
    if search:
        header += f" / '{search}'"
    return _render(state, header, tasks)


def cmd_upcoming(state: AppState, args: list[str]) -> str:
    _, opts = _split_options(args)
    category = opts.get("category", opts.get("cat")) or None
    groups = group_upcoming(state.task_store.tasks, category, opts.get("search", ""))

    state.last_view = [t for bucket in groups.values() for t in bucket]
    if not groups:
        return "Upcoming: no tasks."

    lines = ["Upcoming:"]
    pos = 1
    for day, bucket in groups.items():
        lines.append(f"  {day.strftime('%a, %d %b %Y')}")
        for task in bucket:
            lines.append("  " + format_task_line(pos, task))
            pos += 1
    return "\n".join(lines)


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <n|id>"
    task = resolve_task_ref(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}."
    toggled = state.task_store.toggle_completion(task.id)
    if toggled is None:
        return "Task no longer exists."
    return f"{'Completed' if toggled.is_completed else 'Reopened'}: {toggled.title}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <n|id> [<n|id> ...]"

    ids: list[str] = []
    for ref in args:
        task = resolve_task_ref(state, ref)
        if task is not None:
            ids.append(task.id)

    deleted = state.task_store.soft_delete(ids)
    if not deleted:
        return "Nothing deleted."
    return f"Moved {len(deleted)} task(s) to Deleted. Use /restore to undo."


def cmd_restore(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /restore <n|id>"
    task = resolve_task_ref(state, args[0])
    if task is None or not state.task_store.restore(task.id):
        return f"No deleted task matches {args[0]!r}."
    return f"Restored: {task.title}"


def cmd_purge(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /purge <n|id>"
    task = resolve_task_ref(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}."
    if not task.is_deleted:
        return "Only deleted tasks can be purged. Use /delete first."

    if emit:
        with contextlib.suppress(Exception):
            emit(f"Permanently deleting '{task.title}'...")
    state.task_store.permanently_delete(task.id)
    return "Permanently deleted."


def cmd_categories(state: AppState, args: list[str]) -> str:
    """
    /categories            -> list
    /categories add <name> -> add a custom category
    """
    if args and args[0].lower() == "add":
        name = " ".join(args[1:]).strip()
        if not name:
            return "Usage: /categories add <name>"
        if state.categories.add(name):
            return f"Category added: {name}"
        return f"Category already exists: {name}"

    custom = set(state.categories.custom_categories)
    lines = ["Categories:"]
    for name in state.categories.all_categories():
        lines.append(f"  {name}{' (custom)' if name in custom else ''}")
    return "\n".join(lines)


def cmd_lead(state: AppState, args: list[str]) -> str:
    """
    /lead            -> show reminder lead time
    /lead <minutes>  -> set it and rebuild all reminders
    """
    if not args:
        return f"Reminders fire {state.scheduler.lead_minutes():g} minutes before the deadline."

    try:
        minutes = float(args[0])
    except ValueError:
        return "Usage: /lead <minutes>"

    try:
        state.scheduler.set_lead_minutes(minutes)
    except ValueError:
        raise
    except Exception:
        logger.exception("Failed to persist reminder lead time")
        return "Could not save the lead time."

    scheduled = state.task_store.reconcile_reminders()
    return (
        f"Reminder lead time set to {state.scheduler.lead_minutes():g} min "
        f"({scheduled} reminder(s) scheduled)."
    )


def cmd_reminders(state: AppState, args: list[str]) -> str:
    pending = state.scheduler.pending()
    if not pending:
        return "No pending reminders."
    lines = ["Pending reminders:"]
    for r in pending:
        lines.append(f"  {r.fire_at.strftime('%Y-%m-%d %H:%M')}  {r.title}  #{r.task_id[:8]}")
    return "\n".join(lines)


def cmd_testreminder(state: AppState, args: list[str]) -> str:
    reminder = state.scheduler.schedule_test()
    if reminder is None:
        return "Could not schedule a test reminder. Are notifications enabled?"
    return f"Test reminder will fire at {reminder.fire_at.strftime('%H:%M:%S')}."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show counts per filter and reminder settings.")
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <title> due=... time=HH:MM priority=... category=... notes=...",
)
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <n|id> key=value ...")
registry.register(
    "list",
    cmd_list,
    help_text="List tasks: /list [all|active|today|upcoming|completed|deleted] category=... search=...",
    aliases=["ls"],
)
registry.register("upcoming", cmd_upcoming, help_text="Upcoming tasks grouped by due date.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <n|id>.", aliases=["toggle"])
registry.register("delete", cmd_delete, help_text="Move tasks to Deleted: /delete <n|id> ...", aliases=["rm"])
registry.register("restore", cmd_restore, help_text="Restore a deleted task: /restore <n|id>.")
registry.register("purge", cmd_purge, help_text="Permanently delete a deleted task: /purge <n|id>.")
registry.register(
    "categories", cmd_categories, help_text="List categories or add one: /categories add <name>."
)
registry.register("lead", cmd_lead, help_text="Show/set reminder lead time in minutes.")
registry.register("reminders", cmd_reminders, help_text="Show pending reminders.")
registry.register(
    "testreminder",
    cmd_testreminder,
    help_text="Send a test reminder in a few seconds to check that delivery works.",
)

# src/lifetrack/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta

from ..core.state import AppState
from .task_models import DEFAULT_CATEGORY, Priority, Task

logger = logging.getLogger(__name__)

_RELATIVE_DAYS = {"today": 0, "tomorrow": 1}


def parse_due_date(raw: str, *, today: date | None = None) -> date:
    """Accepts YYYY-MM-DD, 'today', 'tomorrow' or '+N' (days from today)."""
    if today is None:
        today = date.today()
    text = raw.strip().lower()
    if text in _RELATIVE_DAYS:
        return today + timedelta(days=_RELATIVE_DAYS[text])
    if text.startswith("+") and text[1:].isdigit():
        try:
            return today + timedelta(days=int(text[1:]))
        except OverflowError:
            raise ValueError(f"date {raw!r} is out of range") from None
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"bad date {raw!r} (use YYYY-MM-DD, today, tomorrow or +N)") from None


def parse_due_time(raw: str) -> time:
    try:
        parsed = time.fromisoformat(raw.strip())
    except ValueError:
        raise ValueError(f"bad time {raw!r} (use HH:MM)") from None
    return time(parsed.hour, parsed.minute)


def new_task(
    title: str,
    *,
    due_date: date | None = None,
    due_time: time | None = None,
    priority: Priority | str = Priority.MEDIUM,
    category: str = DEFAULT_CATEGORY,
    notes: str = "",
) -> Task:
    """Draft task for TaskStore.add(); the store assigns the real id."""
    return Task(
        id="draft",
        title=title.strip(),
        due_date=due_date,
        due_time=due_time,
        priority=Priority.parse(priority) if isinstance(priority, str) else priority,
        category=category,
        notes=notes,
    )


def add_simple_task(
    state: AppState,
    title: str,
    *,
    due_in_minutes: int | None = None,
    priority: Priority | str = Priority.MEDIUM,
    category: str = DEFAULT_CATEGORY,
    notes: str = "",
) -> Task:
    """
    Convenience helper: add a task due N minutes from now (or undated).
    Uses state.task_store (already constructed in bootstrap).
    """
    due_date = due_time = None
    if due_in_minutes is not None:
        try:
            due = datetime.now() + timedelta(minutes=max(0, int(due_in_minutes)))
        except OverflowError:
            raise ValueError(f"{due_in_minutes} minutes from now is out of range") from None
        due_date, due_time = due.date(), time(due.hour, due.minute)

    return state.task_store.add(
        new_task(
            title,
            due_date=due_date,
            due_time=due_time,
            priority=priority,
            category=category,
            notes=notes,
        )
    )


def resolve_task_ref(state: AppState, ref: str) -> Task | None:
    """
    Resolve a user reference to a task:
    - "3"   -> third task of the last rendered list (1-based)
    - "ab12" -> unique id prefix across the whole store
    """
    ref = ref.strip()
    if not ref:
        return None

    if ref.isdigit():
        pos = int(ref) - 1
        if 0 <= pos < len(state.last_view):
            # Re-read from the store: the rendered copy may be stale.
            return state.task_store.get(state.last_view[pos].id)
        return None

    matches = [t for t in state.task_store.tasks if t.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        logger.debug("Ambiguous task reference %r (%d matches)", ref, len(matches))
    return None

# src/lifetrack/tasks/task_query.py

"""
Pure list-view queries over a task collection.

Nothing here mutates tasks or touches storage: callers pass a snapshot
(TaskStore.tasks) and render the returned list.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from enum import StrEnum

from .task_models import Task


class StatusFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    TODAY = "today"
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    DELETED = "deleted"

    @classmethod
    def parse(cls, raw: str | None) -> StatusFilter:
        if not raw:
            return cls.ALL
        try:
            return cls(raw.strip().lower())
        except ValueError:
            raise ValueError(f"unknown filter: {raw!r}") from None


def matches_status(task: Task, status: StatusFilter, today: date) -> bool:
    if status is StatusFilter.DELETED:
        return task.is_deleted
    if task.is_deleted:
        return False

    if status is StatusFilter.ALL:
        return True
    if status is StatusFilter.ACTIVE:
        return not task.is_completed
    if status is StatusFilter.TODAY:
        # No due date counts as "due today".
        return not task.is_completed and (task.due_date is None or task.due_date == today)
    if status is StatusFilter.UPCOMING:
        return not task.is_completed and task.due_date is not None and task.due_date > today
    if status is StatusFilter.COMPLETED:
        return task.is_completed
    return False


def matches_search(task: Task, search: str) -> bool:
    needle = search.casefold()
    return needle in task.title.casefold() or needle in task.notes.casefold()


def sort_key(task: Task) -> tuple:
    return (
        task.is_completed,
        task.priority.rank,
        task.due_date is None,
        task.due_date or date.max,
        task.title,
        task.id,
    )


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Incomplete first, then priority high->low, dated before undated, then title."""
    return sorted(tasks, key=sort_key)


def query_tasks(
    tasks: Iterable[Task],
    status: StatusFilter = StatusFilter.ALL,
    category: str | None = None,
    search: str = "",
    *,
    today: date | None = None,
) -> list[Task]:
    if today is None:
        today = date.today()

    out = [t for t in tasks if matches_status(t, status, today)]
    if category is not None:
        out = [t for t in out if t.category == category]
    if search:
        out = [t for t in out if matches_search(t, search)]
    return sort_tasks(out)


def group_upcoming(
    tasks: Iterable[Task],
    category: str | None = None,
    search: str = "",
    *,
    today: date | None = None,
) -> dict[date, list[Task]]:
    """
    Upcoming tasks bucketed by due date.

    Keys are in ascending date order; each bucket keeps the order of
    query_tasks() for the upcoming filter.
    """
    buckets: dict[date, list[Task]] = {}
    for task in query_tasks(tasks, StatusFilter.UPCOMING, category, search, today=today):
        if task.due_date is None:
            continue
        buckets.setdefault(task.due_date, []).append(task)
    return {day: buckets[day] for day in sorted(buckets)}

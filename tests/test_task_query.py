# tests/test_task_query.py

from __future__ import annotations

from datetime import date, datetime, timedelta

from lifetrack.tasks.task_models import Priority, Task
from lifetrack.tasks.task_query import (
    StatusFilter,
    group_upcoming,
    query_tasks,
    sort_tasks,
)

TODAY = date(2026, 10, 16)
TOMORROW = TODAY + timedelta(days=1)
STAMP = datetime(2026, 10, 16, 8, 0)


def mk(task_id: str, title: str | None = None, **kwargs) -> Task:
    return Task(id=task_id, title=title or task_id, **kwargs)


def ids(tasks: list[Task]) -> list[str]:
    return [t.id for t in tasks]


def test_deleted_tasks_only_visible_under_deleted_filter() -> None:
    live = mk("live", due_date=TOMORROW)
    gone = mk("gone", due_date=TOMORROW).deleted(STAMP)
    gone_done = mk("gone-done").completed(STAMP).deleted(STAMP)
    tasks = [live, gone, gone_done]

    for status in StatusFilter:
        result = ids(query_tasks(tasks, status, today=TODAY))
        if status is StatusFilter.DELETED:
            assert set(result) == {"gone", "gone-done"}
        else:
            assert "gone" not in result and "gone-done" not in result


def test_today_includes_undated_and_due_today_only() -> None:
    tasks = [
        mk("undated"),
        mk("today", due_date=TODAY),
        mk("tomorrow", due_date=TOMORROW),
        mk("yesterday", due_date=TODAY - timedelta(days=1)),
        mk("done-today", due_date=TODAY).completed(STAMP),
    ]
    assert set(ids(query_tasks(tasks, StatusFilter.TODAY, today=TODAY))) == {"undated", "today"}


def test_upcoming_is_strictly_after_today() -> None:
    tasks = [
        mk("undated"),
        mk("today", due_date=TODAY),
        mk("tomorrow", due_date=TOMORROW),
        mk("done-tomorrow", due_date=TOMORROW).completed(STAMP),
    ]
    assert ids(query_tasks(tasks, StatusFilter.UPCOMING, today=TODAY)) == ["tomorrow"]


def test_active_and_completed_partition_live_tasks() -> None:
    tasks = [mk("a"), mk("b").completed(STAMP)]
    assert ids(query_tasks(tasks, StatusFilter.ACTIVE, today=TODAY)) == ["a"]
    assert ids(query_tasks(tasks, StatusFilter.COMPLETED, today=TODAY)) == ["b"]
    assert ids(query_tasks(tasks, StatusFilter.ALL, today=TODAY)) == ["a", "b"]


def test_high_priority_sorts_first_for_same_deadline() -> None:
    b = mk("B", priority=Priority.LOW, due_date=TOMORROW)
    a = mk("A", priority=Priority.HIGH, due_date=TOMORROW)
    assert ids(query_tasks([b, a], StatusFilter.UPCOMING, today=TODAY)) == ["A", "B"]


def test_sort_order_rules() -> None:
    tasks = [
        mk("done-high", priority=Priority.HIGH).completed(STAMP),
        mk("low-dated", priority=Priority.LOW, due_date=TODAY),
        mk("med-undated", priority=Priority.MEDIUM),
        mk("med-later", priority=Priority.MEDIUM, due_date=TOMORROW),
        mk("med-sooner", priority=Priority.MEDIUM, due_date=TODAY),
        mk("x2", "Beta", priority=Priority.HIGH),
        mk("x1", "Alpha", priority=Priority.HIGH),
        mk("x3", "alpha", priority=Priority.HIGH),
    ]
    result = sort_tasks(tasks)
    assert ids(result) == [
        "x1",  # Alpha
        "x2",  # Beta
        "x3",  # alpha (case-sensitive: lowercase after uppercase)
        "med-sooner",
        "med-later",
        "med-undated",
        "low-dated",
        "done-high",
    ]
    assert sort_tasks(result) == result


def test_dated_before_undated_within_priority_tier() -> None:
    tasks = [mk("Aaa"), mk("Zzz", due_date=TODAY + timedelta(days=300))]
    assert ids(sort_tasks(tasks)) == ["Zzz", "Aaa"]


def test_category_and_search_filters() -> None:
    tasks = [
        mk("1", "Buy milk", category="Shopping"),
        mk("2", "Gym session", category="Health", notes="Leg DAY"),
        mk("3", "Milkshake recipe", category="Personal"),
    ]
    assert ids(query_tasks(tasks, category="Shopping", today=TODAY)) == ["1"]
    assert ids(query_tasks(tasks, search="MILK", today=TODAY)) == ["1", "3"]
    assert ids(query_tasks(tasks, search="leg day", today=TODAY)) == ["2"]
    assert query_tasks(tasks, category="Work", today=TODAY) == []


def test_group_upcoming_buckets_by_day_in_date_order() -> None:
    day2 = TODAY + timedelta(days=2)
    tasks = [
        mk("late-high", priority=Priority.HIGH, due_date=day2),
        mk("soon-low", priority=Priority.LOW, due_date=TOMORROW),
        mk("soon-high", priority=Priority.HIGH, due_date=TOMORROW),
        mk("undated", priority=Priority.HIGH),
    ]
    groups = group_upcoming(tasks, today=TODAY)
    assert list(groups) == [TOMORROW, day2]
    assert ids(groups[TOMORROW]) == ["soon-high", "soon-low"]
    assert ids(groups[day2]) == ["late-high"]


def test_status_filter_parse() -> None:
    assert StatusFilter.parse("Upcoming") is StatusFilter.UPCOMING
    assert StatusFilter.parse(None) is StatusFilter.ALL

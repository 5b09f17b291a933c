# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from lifetrack.tasks.task_models import Task
from lifetrack.tasks.task_scheduler import Reminder


class FakeClock:
    """Controllable clock: call it to get `now`, move it with advance()."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeNotificationCenter:
    """
    NotificationCenter that records every call.

    - `fail_add` makes add() raise (simulates a system scheduling error)
    """

    def __init__(self, *, granted: bool = True, fail_add: bool = False) -> None:
        self.granted = granted
        self.fail_add = fail_add
        self.reminders: dict[str, Reminder] = {}
        self.calls: list[tuple[str, str | None]] = []

    def request_authorization(self) -> bool:
        self.calls.append(("authorize", None))
        return self.granted

    def add(self, reminder: Reminder) -> None:
        self.calls.append(("add", reminder.task_id))
        if self.fail_add:
            raise RuntimeError("scheduling failed")
        self.reminders[reminder.task_id] = reminder

    def remove(self, task_ids: Iterable[str]) -> None:
        for task_id in task_ids:
            self.calls.append(("remove", task_id))
            self.reminders.pop(task_id, None)

    def remove_all(self) -> None:
        self.calls.append(("remove_all", None))
        self.reminders.clear()

    def pending(self) -> list[Reminder]:
        return list(self.reminders.values())


class InMemoryTaskRepo:
    """TaskRepo without SQLite; `fail_save` simulates a write error."""

    def __init__(self, tasks: list[Task] | None = None, *, fail_save: bool = False) -> None:
        self.saved: list[Task] = list(tasks or [])
        self.fail_save = fail_save
        self.save_calls = 0

    def load_tasks(self) -> list[Task]:
        return list(self.saved)

    def save_tasks(self, tasks: Iterable[Task]) -> None:
        self.save_calls += 1
        if self.fail_save:
            raise OSError("disk full")
        self.saved = list(tasks)


@dataclass(slots=True)
class SentMessage:
    text: str
    title: str | None


@dataclass(slots=True)
class FakeMessenger:
    """
    Fake OutboundMessenger used by reminder loop tests.
    """

    sent: list[SentMessage] = field(default_factory=list)
    fail: bool = False

    async def send_text(self, *, text: str, title: str | None = None) -> None:
        if self.fail:
            raise RuntimeError("send failed")
        self.sent.append(SentMessage(text=text, title=title))


class FakeSettingsRepo:
    """SettingsRepo holding the lead time in memory."""

    def __init__(self, lead_minutes: float | None = None) -> None:
        self.lead_minutes = lead_minutes

    def get_lead_minutes(self) -> float | None:
        return self.lead_minutes

    def set_lead_minutes(self, minutes: float) -> None:
        self.lead_minutes = minutes

# src/lifetrack/tasks/task_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

Two halves:
- ReminderScheduler: derives at most one pending reminder per task id and
  registers it with a NotificationCenter. Driven synchronously by the store.
- run_reminder_loop: a small polling loop that pops due reminders and sends
  them out via an injected messenger port.
"""

import asyncio
import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import StrEnum

from ..core.ports import NotificationCenter, OutboundMessenger, ReminderQueue, SettingsRepo
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_LEAD_MINUTES = 60.0
MAX_NOTES_IN_BODY = 100

# Never a uuid, so it cannot collide with a task id.
TEST_REMINDER_ID = "test-reminder"
TEST_REMINDER_DELAY_SECONDS = 5.0


class ReminderState(StrEnum):
    UNSCHEDULED = "unscheduled"
    SCHEDULED = "scheduled"
    FIRED = "fired"


@dataclass(slots=True, frozen=True)
class Reminder:
    """One pending local notification for a task."""

    task_id: str
    fire_at: datetime
    title: str
    body: str


def effective_lead_minutes(raw: float | None) -> float:
    """Unset, non-positive or non-finite lead time falls back to 60 minutes."""
    if raw is None:
        return DEFAULT_LEAD_MINUTES
    try:
        val = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_LEAD_MINUTES
    if not math.isfinite(val) or val <= 0:
        return DEFAULT_LEAD_MINUTES
    return val


def deadline_for(task: Task) -> datetime | None:
    """Due date at due time (seconds zeroed), or at midnight when there is no time."""
    if task.due_date is None:
        return None
    at = time(0, 0)
    if task.due_time is not None:
        at = time(task.due_time.hour, task.due_time.minute)
    return datetime.combine(task.due_date, at)


def fire_moment(task: Task, lead_minutes: float | None) -> datetime | None:
    """Deadline minus lead time; None when undated or before the first representable moment."""
    deadline = deadline_for(task)
    if deadline is None:
        return None
    try:
        return deadline - timedelta(minutes=effective_lead_minutes(lead_minutes))
    except OverflowError:
        logger.debug("Fire moment out of range task_id=%s deadline=%s", task.id, deadline)
        return None


def is_eligible(task: Task) -> bool:
    return not task.is_completed and task.due_date is not None


def build_reminder_content(task: Task) -> tuple[str, str]:
    """Notification title and body: notes first (truncated), then priority and category."""
    title = f"Task Reminder: {task.title}"
    tail = f"({task.priority.label} Priority) - {task.category}"
    if not task.notes:
        return title, f"Don't forget to complete this task! {tail}"

    notes = task.notes
    if len(notes) > MAX_NOTES_IN_BODY:
        notes = notes[:MAX_NOTES_IN_BODY] + "..."
    return title, f"{notes}\n\n{tail}"


class ReminderScheduler:
    """
    Keeps the notification center in sync with task state.

    The store calls cancel()/schedule() around every relevant mutation;
    reconcile() rebuilds everything from scratch at startup.
    Failures are logged and never propagate: the next mutation (or the next
    startup) is the retry point.
    """

    def __init__(
        self,
        center: NotificationCenter,
        *,
        settings: SettingsRepo | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._center = center
        self._settings = settings
        self._clock = clock

    def lead_minutes(self) -> float:
        if self._settings is None:
            return DEFAULT_LEAD_MINUTES
        try:
            raw = self._settings.get_lead_minutes()
        except Exception:
            logger.exception("Failed to read reminder lead time; using default.")
            raw = None
        return effective_lead_minutes(raw)

    def set_lead_minutes(self, minutes: float) -> None:
        """Persist a new lead time. Callers reconcile afterwards."""
        if not math.isfinite(minutes) or minutes <= 0:
            raise ValueError(f"lead time must be a positive number of minutes, got {minutes:g}")
        if self._settings is None:
            raise RuntimeError("no settings repository to store the lead time")
        self._settings.set_lead_minutes(minutes)

    def request_permission(self) -> bool:
        try:
            granted = bool(self._center.request_authorization())
        except Exception:
            logger.exception("Notification permission request failed")
            return False
        if not granted:
            logger.warning("Notification permission denied; reminders will not be delivered.")
        return granted

    def schedule(self, task: Task) -> Reminder | None:
        """Register a reminder for the task if it is eligible and still in the future."""
        if not is_eligible(task):
            return None

        fire_at = fire_moment(task, self.lead_minutes())
        if fire_at is None:
            return None

        now = self._clock()
        if fire_at <= now:
            logger.debug("Reminder skipped task_id=%s fire_at=%s is not in the future", task.id, fire_at)
            return None

        title, body = build_reminder_content(task)
        reminder = Reminder(task_id=task.id, fire_at=fire_at, title=title, body=body)
        try:
            self._center.add(reminder)
        except Exception:
            logger.exception("Failed to register reminder task_id=%s", task.id)
            return None

        logger.debug("Reminder scheduled task_id=%s fire_at=%s", task.id, fire_at)
        return reminder

    def schedule_test(self, delay_seconds: float = TEST_REMINDER_DELAY_SECONDS) -> Reminder | None:
        """Register a sample reminder a few seconds out to check that delivery works."""
        reminder = Reminder(
            task_id=TEST_REMINDER_ID,
            fire_at=self._clock() + timedelta(seconds=delay_seconds),
            title="Test Notification",
            body="Your notifications are working properly!",
        )
        try:
            self._center.add(reminder)
        except Exception:
            logger.exception("Failed to register test reminder")
            return None
        logger.info("Test reminder scheduled fire_at=%s", reminder.fire_at)
        return reminder

    def cancel(self, task_id: str) -> None:
        try:
            self._center.remove([task_id])
        except Exception:
            logger.exception("Failed to cancel reminder task_id=%s", task_id)

    def reschedule(self, task: Task) -> Reminder | None:
        self.cancel(task.id)
        return self.schedule(task)

    def reconcile(self, tasks: Iterable[Task]) -> int:
        """Clear every pending reminder, then schedule all eligible, non-deleted tasks."""
        try:
            self._center.remove_all()
        except Exception:
            logger.exception("Failed to clear pending reminders")

        scheduled = 0
        for task in tasks:
            if task.is_deleted:
                continue
            if self.schedule(task) is not None:
                scheduled += 1

        logger.info("Reminders reconciled scheduled=%d", scheduled)
        return scheduled

    def pending(self) -> list[Reminder]:
        try:
            items = list(self._center.pending())
        except Exception:
            logger.exception("Failed to list pending reminders")
            return []
        return sorted(items, key=lambda r: (r.fire_at, r.task_id))

    def state_of(self, task_id: str) -> ReminderState:
        if any(r.task_id == task_id for r in self.pending()):
            return ReminderState.SCHEDULED
        delivered = getattr(self._center, "delivered", None)
        if delivered is not None and task_id in delivered:
            return ReminderState.FIRED
        return ReminderState.UNSCHEDULED


async def run_reminder_loop(
        queue: ReminderQueue,
        messenger: OutboundMessenger,
        *,
        interval_seconds: float = 15.0,
        clock: Callable[[], datetime] = datetime.now,
) -> None:
    """
    Simple polling delivery loop.

    Every interval_seconds:
    - pop reminders whose fire moment has passed
    - send each via messenger.send_text(...)
    Send failures are logged; a popped reminder is never retried.

    To stop the loop, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        try:
            due = queue.pop_due(clock())
        except Exception:
            logger.exception("pop_due failed")
            due = []

        for reminder in due:
            try:
                await messenger.send_text(text=reminder.body, title=reminder.title)
                logger.info("Reminder delivered task_id=%s", reminder.task_id)
            except Exception:
                logger.exception("Reminder delivery failed task_id=%s", reminder.task_id)

        await asyncio.sleep(sleep_s)

# src/lifetrack/tasks/notifications.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from ..logging_setup import REMINDER_THREAD_NAME
from .task_scheduler import Reminder, run_reminder_loop

if TYPE_CHECKING:
    from ..core.state import AppState

logger = logging.getLogger(__name__)


class ReminderPermissionError(RuntimeError):
    """Raised when a reminder is registered without notification permission."""


class LocalNotificationCenter:
    """
    In-process notification center.

    Holds at most one pending reminder per task id (add replaces). The delivery
    loop consumes due reminders with pop_due(), which also records their ids as
    delivered. Shared between the store owner and the delivery thread, so all
    state sits behind a lock.
    """

    def __init__(self, *, enabled: bool = True) -> None:
        self._enabled = enabled
        self._authorized: bool | None = None
        self._pending: dict[str, Reminder] = {}
        self._delivered: set[str] = set()
        self._lock = threading.Lock()

    def request_authorization(self) -> bool:
        self._authorized = self._enabled
        return self._authorized

    def add(self, reminder: Reminder) -> None:
        if self._authorized is False:
            raise ReminderPermissionError("notifications are not authorized")
        with self._lock:
            self._pending[reminder.task_id] = reminder
            self._delivered.discard(reminder.task_id)

    def remove(self, task_ids: Iterable[str]) -> None:
        with self._lock:
            for task_id in task_ids:
                self._pending.pop(task_id, None)

    def remove_all(self) -> None:
        with self._lock:
            self._pending.clear()

    def pending(self) -> list[Reminder]:
        with self._lock:
            return list(self._pending.values())

    @property
    def delivered(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._delivered)

    def pop_due(self, now: datetime) -> list[Reminder]:
        with self._lock:
            due = [r for r in self._pending.values() if r.fire_at <= now]
            for r in due:
                del self._pending[r.task_id]
                self._delivered.add(r.task_id)
        return sorted(due, key=lambda r: r.fire_at)


@dataclass(slots=True)
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    task: asyncio.Task

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.task.cancel)
        except Exception:
            logger.debug("Failed to signal reminder loop stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_reminders_in_background(state: AppState) -> ReminderBackgroundRunner | None:
    """
    Run the reminder delivery loop in a background thread.

    The console REPL blocks on input(), so the async loop gets its own thread
    and event loop.
    """
    center = state.notification_center
    if not isinstance(center, LocalNotificationCenter):
        logger.info("Notification center has no local queue; delivery loop not started.")
        return None

    interval = float(getattr(state.settings, "reminder_poll_seconds", 15.0))
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        task = loop.create_task(
            run_reminder_loop(center, state.messenger, interval_seconds=interval)
        )

        holder["loop"] = loop
        holder["task"] = task
        ready.set()

        try:
            with contextlib.suppress(asyncio.CancelledError):
                loop.run_until_complete(task)
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name=REMINDER_THREAD_NAME, daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    task = holder.get("task")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(task, asyncio.Task):
        logger.error("Reminder thread did not initialize properly.")
        return None

    logger.info("Reminder delivery thread started (interval=%.1fs).", interval)
    return ReminderBackgroundRunner(thread=t, loop=loop, task=task)

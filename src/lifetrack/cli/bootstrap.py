# src/lifetrack/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (database/store/scheduler/categories).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.console_connector import ConsoleMessenger
from ..core.ports import OutboundMessenger
from ..core.state import AppState
from ..tasks.categories import CategoryRegistry
from ..tasks.notifications import LocalNotificationCenter
from ..tasks.task_db import TaskDatabase
from ..tasks.task_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, messenger: OutboundMessenger | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    database = TaskDatabase(settings.tasks_db_path)
    center = LocalNotificationCenter(enabled=settings.notifications_enabled)
    scheduler = ReminderScheduler(center, settings=database)

    return AppState(
        settings=settings,
        database=database,
        task_store=TaskStore(database, scheduler),
        categories=CategoryRegistry(database),
        scheduler=scheduler,
        notification_center=center,
        messenger=messenger or ConsoleMessenger(),
    )


def start_reminders(state: AppState) -> int:
    """Permission bootstrap + full reconciliation against persisted tasks."""
    state.scheduler.request_permission()
    return state.task_store.reconcile_reminders()

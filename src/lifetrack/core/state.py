# src/lifetrack/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tasks.categories import CategoryRegistry
from ..tasks.task_db import TaskDatabase
from ..tasks.task_models import Task
from ..tasks.task_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore
from .ports import NotificationCenter, OutboundMessenger


@dataclass
class AppState:
    # Settings object (real Settings or a test stand-in with the same attributes).
    settings: Any

    database: TaskDatabase
    task_store: TaskStore
    categories: CategoryRegistry
    scheduler: ReminderScheduler
    notification_center: NotificationCenter
    messenger: OutboundMessenger

    # Last list rendered by the console; numeric task references index into it.
    last_view: list[Task] = field(default_factory=list)

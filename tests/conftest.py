# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from lifetrack.cli.bootstrap import create_initial_state
from lifetrack.core.state import AppState
from lifetrack.tasks.task_db import TaskDatabase
from lifetrack.tasks.task_scheduler import ReminderScheduler
from lifetrack.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeMessenger, FakeNotificationCenter, FakeSettingsRepo

# Friday noon; tests build due dates relative to this.
NOW = datetime(2026, 10, 16, 12, 0)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def center() -> FakeNotificationCenter:
    return FakeNotificationCenter()


@pytest.fixture()
def db(tmp_path: Path) -> TaskDatabase:
    return TaskDatabase(tmp_path / "tasks.sqlite3")


@pytest.fixture()
def scheduler(center: FakeNotificationCenter, clock: FakeClock) -> ReminderScheduler:
    return ReminderScheduler(center, settings=FakeSettingsRepo(60), clock=clock)


@pytest.fixture()
def store(db: TaskDatabase, scheduler: ReminderScheduler, clock: FakeClock) -> TaskStore:
    """
    TaskStore over a real SQLite file with a fake notification center.

    Persistence is part of what we want to test, so the database is real.
    """
    return TaskStore(db, scheduler, clock=clock)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="lifetrack-test",
        log_level="DEBUG",
        console_enabled=False,
        notifications_enabled=True,
        reminder_poll_seconds=0.01,
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """Fully wired AppState (real clock) as the console sees it."""
    return create_initial_state(settings=settings, messenger=FakeMessenger())

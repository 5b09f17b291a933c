# src/lifetrack/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps persistence and notification delivery swappable and makes testing easier.
"""

from typing import Any, Awaitable, Iterable, Protocol


class OutboundMessenger(Protocol):
    """
    Connector-side port: how the reminder loop delivers text to the user.

    The console connector prints; other connectors may route it elsewhere.
    """

    def send_text(self, *, text: str, title: str | None = None) -> Awaitable[None]: ...


class NotificationCenter(Protocol):
    """
    Local reminder registry, keyed by task id.

    Reminders are kept as Any to avoid import coupling with the scheduler module.
    """

    def request_authorization(self) -> bool: ...
    def add(self, reminder: Any) -> None: ...
    def remove(self, task_ids: Iterable[str]) -> None: ...
    def remove_all(self) -> None: ...
    def pending(self) -> list[Any]: ...


class TaskRepo(Protocol):
    # Task collection (whole-list load/save)
    def load_tasks(self) -> list[Any]: ...
    def save_tasks(self, tasks: Iterable[Any]) -> None: ...


class CategoryRepo(Protocol):
    def load_custom_categories(self) -> list[str]: ...
    def save_custom_categories(self, names: Iterable[str]) -> None: ...


class SettingsRepo(Protocol):
    def get_lead_minutes(self) -> float | None: ...
    def set_lead_minutes(self, minutes: float) -> None: ...


class ReminderQueue(Protocol):
    """Source of reminders whose fire moment has passed (consumed by the delivery loop)."""

    def pop_due(self, now: Any) -> list[Any]: ...

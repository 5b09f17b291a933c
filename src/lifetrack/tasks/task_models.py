# src/lifetrack/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Sort rank: 0 is the most urgent."""
        return _PRIORITY_RANK[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"unknown priority: {raw!r}") from None


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class TaskState(StrEnum):
    """Lifecycle state derived from the completion and deletion flags."""

    ACTIVE = "active"
    COMPLETED = "completed"
    DELETED = "deleted"
    COMPLETED_DELETED = "completed_deleted"


DEFAULT_CATEGORY = "Personal"


@dataclass(slots=True, frozen=True)
class Task:
    """
    A single tracked task.

    Tasks are immutable; the store swaps whole values on every mutation.
    Timestamps are tied to their flags:
    - completed_date is set iff is_completed
    - deleted_date is set iff is_deleted
    """

    id: str
    title: str
    is_completed: bool = False
    completed_date: datetime | None = None
    due_date: date | None = None
    due_time: time | None = None
    priority: Priority = Priority.MEDIUM
    category: str = DEFAULT_CATEGORY
    notes: str = ""
    is_deleted: bool = False
    deleted_date: datetime | None = None

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("title is required")
        if not isinstance(self.priority, Priority):
            object.__setattr__(self, "priority", Priority.parse(str(self.priority)))
        if self.is_completed != (self.completed_date is not None):
            raise ValueError("completed_date must be set iff is_completed")
        if self.is_deleted != (self.deleted_date is not None):
            raise ValueError("deleted_date must be set iff is_deleted")

    @property
    def state(self) -> TaskState:
        if self.is_completed and self.is_deleted:
            return TaskState.COMPLETED_DELETED
        if self.is_deleted:
            return TaskState.DELETED
        if self.is_completed:
            return TaskState.COMPLETED
        return TaskState.ACTIVE

    # ---- transitions ----

    def completed(self, at: datetime) -> Task:
        return replace(self, is_completed=True, completed_date=at)

    def reopened(self) -> Task:
        return replace(self, is_completed=False, completed_date=None)

    def deleted(self, at: datetime) -> Task:
        return replace(self, is_deleted=True, deleted_date=at)

    def restored(self) -> Task:
        return replace(self, is_deleted=False, deleted_date=None)

    # ---- serialization ----

    def to_dict(self) -> dict[str, Any]:
        """Plain dict form; absent optional fields are omitted."""
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "is_completed": self.is_completed,
            "priority": self.priority.value,
            "category": self.category,
            "notes": self.notes,
            "is_deleted": self.is_deleted,
        }
        if self.completed_date is not None:
            out["completed_date"] = self.completed_date.isoformat()
        if self.due_date is not None:
            out["due_date"] = self.due_date.isoformat()
        if self.due_time is not None:
            out["due_time"] = self.due_time.isoformat()
        if self.deleted_date is not None:
            out["deleted_date"] = self.deleted_date.isoformat()
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        if not isinstance(raw, dict):
            raise ValueError("task record must be a mapping")
        task_id = raw.get("id")
        if not isinstance(task_id, str) or not task_id:
            raise ValueError("task record has no id")

        def opt(key: str, parse: Any) -> Any:
            val = raw.get(key)
            if val is None:
                return None
            if not isinstance(val, str):
                raise ValueError(f"{key} must be an ISO string")
            return parse(val)

        return cls(
            id=task_id,
            title=str(raw.get("title") or ""),
            is_completed=bool(raw.get("is_completed", False)),
            completed_date=opt("completed_date", datetime.fromisoformat),
            due_date=opt("due_date", date.fromisoformat),
            due_time=opt("due_time", time.fromisoformat),
            priority=Priority.parse(raw.get("priority")),
            category=str(raw.get("category") or DEFAULT_CATEGORY),
            notes=str(raw.get("notes") or ""),
            is_deleted=bool(raw.get("is_deleted", False)),
            deleted_date=opt("deleted_date", datetime.fromisoformat),
        )

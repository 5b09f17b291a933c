# src/lifetrack/tasks/task_store.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum

from ..core.ports import TaskRepo
from .task_models import Task
from .task_scheduler import ReminderScheduler

logger = logging.getLogger(__name__)


class ChangeKind(StrEnum):
    ADDED = "added"
    UPDATED = "updated"
    COMPLETION_TOGGLED = "completion_toggled"
    SOFT_DELETED = "soft_deleted"
    RESTORED = "restored"
    PURGED = "purged"


@dataclass(slots=True, frozen=True)
class StoreChange:
    kind: ChangeKind
    task_ids: tuple[str, ...]


StoreListener = Callable[[StoreChange], None]


def _new_task_id() -> str:
    return str(uuid.uuid4())


class TaskStore:
    """
    Owner of the task collection.

    Every mutation follows the same sequence:
    - replace the in-memory value
    - persist the whole collection (failures are logged, never rolled back)
    - cancel/re-evaluate the task's reminder
    - notify listeners

    Mutations on unknown ids are silent no-ops reported through the return value.
    Readers only ever see immutable Task values and tuple snapshots.
    """

    def __init__(
        self,
        repo: TaskRepo,
        scheduler: ReminderScheduler | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = _new_task_id,
    ) -> None:
        self._repo = repo
        self._scheduler = scheduler
        self._clock = clock
        self._id_factory = id_factory
        self._tasks: list[Task] = list(repo.load_tasks())
        self._listeners: list[StoreListener] = []
        logger.info("TaskStore ready total=%d", len(self._tasks))

    # ---- read access ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def get(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return None if idx is None else self._tasks[idx]

    def __len__(self) -> int:
        return len(self._tasks)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- low-level helpers ----

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _persist(self) -> None:
        try:
            self._repo.save_tasks(self._tasks)
        except Exception:
            logger.exception("Failed to persist tasks; keeping in-memory state.")

    def _notify(self, kind: ChangeKind, task_ids: Iterable[str]) -> None:
        change = StoreChange(kind=kind, task_ids=tuple(task_ids))
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Store listener failed change=%s", change.kind.value)

    def _schedule(self, task: Task) -> None:
        if self._scheduler is not None:
            self._scheduler.schedule(task)

    def _cancel(self, task_id: str) -> None:
        if self._scheduler is not None:
            self._scheduler.cancel(task_id)

    # ---- public API ----

    def add(self, task: Task) -> Task:
        """Append a new active task under a fresh id; returns the stored value."""
        new = replace(
            task,
            id=self._id_factory(),
            is_completed=False,
            completed_date=None,
            is_deleted=False,
            deleted_date=None,
        )
        self._tasks.append(new)
        self._persist()
        self._schedule(new)
        logger.debug("Task added id=%s due=%s %s", new.id, new.due_date, new.due_time)
        self._notify(ChangeKind.ADDED, [new.id])
        return new

    def update(self, task: Task) -> bool:
        idx = self._index_of(task.id)
        if idx is None:
            logger.debug("update: task not found id=%s", task.id)
            return False

        self._tasks[idx] = task
        self._persist()
        self._cancel(task.id)
        if not task.is_deleted:
            self._schedule(task)
        self._notify(ChangeKind.UPDATED, [task.id])
        return True

    def soft_delete(self, task_ids: Iterable[str]) -> list[str]:
        """
        Mark the given tasks deleted and return the affected ids.

        Unknown ids are skipped; an id given twice is handled once.
        """
        now = self._clock()
        affected: list[str] = []
        for task_id in dict.fromkeys(task_ids):
            idx = self._index_of(task_id)
            if idx is None:
                logger.debug("soft_delete: task not found id=%s", task_id)
                continue
            self._tasks[idx] = self._tasks[idx].deleted(now)
            affected.append(task_id)

        if not affected:
            return []

        self._persist()
        for task_id in affected:
            self._cancel(task_id)
        logger.info("Tasks soft-deleted count=%d", len(affected))
        self._notify(ChangeKind.SOFT_DELETED, affected)
        return affected

    def soft_delete_at(self, view: Sequence[Task], positions: Iterable[int]) -> list[str]:
        """Soft-delete by 0-based positions in a displayed list (out-of-range skipped)."""
        ids = [view[p].id for p in positions if 0 <= p < len(view)]
        return self.soft_delete(ids)

    def restore(self, task_id: str) -> bool:
        idx = self._index_of(task_id)
        if idx is None or not self._tasks[idx].is_deleted:
            logger.debug("restore: no deleted task id=%s", task_id)
            return False

        task = self._tasks[idx].restored()
        self._tasks[idx] = task
        self._persist()
        if not task.is_completed:
            self._cancel(task_id)
            self._schedule(task)
        self._notify(ChangeKind.RESTORED, [task_id])
        return True

    def permanently_delete(self, task_id: str) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("permanently_delete: task not found id=%s", task_id)
            return False

        del self._tasks[idx]
        self._persist()
        self._cancel(task_id)
        logger.info("Task permanently deleted id=%s", task_id)
        self._notify(ChangeKind.PURGED, [task_id])
        return True

    def toggle_completion(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("toggle_completion: task not found id=%s", task_id)
            return None

        current = self._tasks[idx]
        task = current.reopened() if current.is_completed else current.completed(self._clock())
        self._tasks[idx] = task
        self._persist()

        self._cancel(task_id)
        if not task.is_completed and not task.is_deleted:
            self._schedule(task)

        self._notify(ChangeKind.COMPLETION_TOGGLED, [task_id])
        return task

    def reconcile_reminders(self) -> int:
        """Startup reconciliation: rebuild all reminders from the current collection."""
        if self._scheduler is None:
            return 0
        return self._scheduler.reconcile(self._tasks)

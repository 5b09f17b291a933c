# src/lifetrack/tasks/task_db.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterable
from pathlib import Path

from .task_models import Task

logger = logging.getLogger(__name__)

LEAD_MINUTES_KEY = "reminder_lead_minutes"


class TaskDatabase:
    """
    SQLite persistence for the three stored records:
    - the ordered task collection
    - the custom category list
    - key/value settings (reminder lead time)

    Every save rewrites its record in one transaction; loads never raise and
    fall back to empty values when the stored data cannot be read.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._ensure_schema()
        except sqlite3.Error:
            logger.exception("TaskDatabase schema setup failed db=%s", self._db_path)
        logger.info("TaskDatabase ready db=%s", self._db_path)

    @property
    def path(self) -> Path:
        return self._db_path

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    position INTEGER NOT NULL,
                    title TEXT NOT NULL,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    completed_date TEXT,
                    due_date TEXT,
                    due_time TEXT,
                    priority TEXT NOT NULL DEFAULT 'medium',
                    category TEXT NOT NULL DEFAULT 'Personal',
                    notes TEXT NOT NULL DEFAULT '',
                    is_deleted INTEGER NOT NULL DEFAULT 0,
                    deleted_date TEXT
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS custom_categories (
                    name TEXT PRIMARY KEY,
                    position INTEGER NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        raw = {key: row[key] for key in row.keys() if row[key] is not None}
        raw["is_completed"] = bool(row["is_completed"])
        raw["is_deleted"] = bool(row["is_deleted"])
        raw.pop("position", None)
        return Task.from_dict(raw)

    # ---- tasks ----

    def load_tasks(self) -> list[Task]:
        conn = None
        try:
            conn = self._get_conn()
            rows = conn.execute("SELECT * FROM tasks ORDER BY position ASC").fetchall()
            tasks = [self._row_to_task(r) for r in rows]
        except (sqlite3.Error, ValueError):
            logger.exception("Stored tasks are unreadable; starting with an empty list.")
            return []
        finally:
            if conn is not None:
                conn.close()
        logger.debug("Loaded %d tasks from %s", len(tasks), self._db_path)
        return tasks

    def save_tasks(self, tasks: Iterable[Task]) -> None:
        rows = []
        for pos, task in enumerate(tasks):
            d = task.to_dict()
            rows.append(
                (
                    d["id"],
                    pos,
                    d["title"],
                    int(d["is_completed"]),
                    d.get("completed_date"),
                    d.get("due_date"),
                    d.get("due_time"),
                    d["priority"],
                    d["category"],
                    d["notes"],
                    int(d["is_deleted"]),
                    d.get("deleted_date"),
                )
            )

        conn = self._get_conn()
        try:
            with conn:
                conn.execute("DELETE FROM tasks")
                conn.executemany(
                    """
                    INSERT INTO tasks(
                        id, position, title,
                        is_completed, completed_date,
                        due_date, due_time,
                        priority, category, notes,
                        is_deleted, deleted_date
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    rows,
                )
            logger.debug("Saved %d tasks to %s", len(rows), self._db_path)
        finally:
            conn.close()

    # ---- categories ----

    def load_custom_categories(self) -> list[str]:
        conn = None
        try:
            conn = self._get_conn()
            rows = conn.execute(
                "SELECT name FROM custom_categories ORDER BY position ASC"
            ).fetchall()
            return [str(r["name"]) for r in rows if r["name"]]
        except sqlite3.Error:
            logger.exception("Stored categories are unreadable; starting with none.")
            return []
        finally:
            if conn is not None:
                conn.close()

    def save_custom_categories(self, names: Iterable[str]) -> None:
        conn = self._get_conn()
        try:
            with conn:
                conn.execute("DELETE FROM custom_categories")
                conn.executemany(
                    "INSERT INTO custom_categories(name, position) VALUES (?, ?)",
                    [(name, pos) for pos, name in enumerate(names)],
                )
        finally:
            conn.close()

    # ---- settings ----

    def get_setting(self, key: str) -> str | None:
        conn = None
        try:
            conn = self._get_conn()
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
            return None if row is None else row["value"]
        except sqlite3.Error:
            logger.exception("Failed to read setting %s", key)
            return None
        finally:
            if conn is not None:
                conn.close()

    def set_setting(self, key: str, value: str | None) -> None:
        conn = self._get_conn()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO settings(key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, value),
                )
        finally:
            conn.close()

    def get_lead_minutes(self) -> float | None:
        raw = self.get_setting(LEAD_MINUTES_KEY)
        if raw is None:
            return None
        try:
            return float(raw)
        except ValueError:
            return None

    def set_lead_minutes(self, minutes: float) -> None:
        self.set_setting(LEAD_MINUTES_KEY, str(float(minutes)))

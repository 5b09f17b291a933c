# src/lifetrack/tasks/categories.py

from __future__ import annotations

import logging

from ..core.ports import CategoryRepo

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: tuple[str, ...] = ("Personal", "Work", "Study", "Health", "Shopping", "Other")


class CategoryRegistry:
    """
    Built-in categories followed by user-added ones.

    Custom names are deduplicated at add time (against built-ins and each
    other) and kept in insertion order.
    """

    def __init__(self, repo: CategoryRepo) -> None:
        self._repo = repo
        self._custom: list[str] = list(repo.load_custom_categories())

    @property
    def custom_categories(self) -> tuple[str, ...]:
        return tuple(self._custom)

    def add(self, name: str) -> bool:
        """Add a custom category. Returns False when it already exists (or is blank)."""
        name = (name or "").strip()
        if not name:
            return False
        if name in DEFAULT_CATEGORIES or name in self._custom:
            return False

        self._custom.append(name)
        try:
            self._repo.save_custom_categories(self._custom)
        except Exception:
            logger.exception("Failed to persist custom categories; keeping in-memory list.")
        logger.info("Category added name=%s", name)
        return True

    def all_categories(self) -> list[str]:
        return [*DEFAULT_CATEGORIES, *self._custom]

    def __contains__(self, name: object) -> bool:
        return name in DEFAULT_CATEGORIES or name in self._custom

# src/lifetrack/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

REMINDER_THREAD_NAME = "reminders"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the interactive console readable while the prompt is waiting for input.

    Reminders are already printed by the console messenger, so records from the
    delivery thread only reach the terminal at WARNING+. The database layer logs
    every save and is held back the same way. Everything else under lifetrack
    passes; warnings and third-party records need ERROR+.
    """

    QUIET_LOGGERS: dict[str, int] = {
        "lifetrack.tasks.task_db": logging.WARNING,
        "lifetrack.tasks.task_scheduler": logging.WARNING,
        "lifetrack.tasks.notifications": logging.WARNING,
    }

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if record.threadName == REMINDER_THREAD_NAME:
            return record.levelno >= logging.WARNING

        for prefix, min_level in self.QUIET_LOGGERS.items():
            if name == prefix or name.startswith(prefix + "."):
                return record.levelno >= min_level

        if name == "lifetrack" or name.startswith("lifetrack."):
            return True

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/lifetrack",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler: readable + filtered for interactive use
    - File handler: full logs for debugging

    Call this ONCE, very early (before first logger.info).
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "lifetrack.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)

# src/taskio_reminders/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "taskio-reminders.log"

# Minimum level a record needs to reach the console, by logger-name prefix.
# First match wins; anything unlisted (third-party) only shows errors.
_CONSOLE_MIN_LEVELS: tuple[tuple[str, int], ...] = (
    ("taskio_reminders.reminders.store", logging.WARNING),
    ("taskio_reminders.", logging.NOTSET),
    ("py.warnings", logging.ERROR),
)


class _ConsoleNoiseFilter(logging.Filter):
    """
    The console shares the terminal with the operator prompt, so it only shows
    our own logs; store chatter and third-party libraries need WARNING/ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, level in _CONSOLE_MIN_LEVELS:
            if record.name.startswith(prefix):
                return record.levelno >= level
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskio",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> Path:
    """
    Configure root logging for the service and return the log file path.

    Console: filtered, at console_level.
    File: everything at file_level, rotated. Each send and each failed
    bookkeeping write is logged there with the task id, which is what you
    grep when a user reports a missing or duplicated reminder.

    Call once, before the scheduler thread starts.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    console_fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # The scheduler runs in its own thread; keep the thread name in the file.
    file_fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(console_fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = RotatingFileHandler(
        str(log_file),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    fh.setLevel(file_level)
    fh.setFormatter(file_fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)

    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return log_file

# src/taskio_reminders/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the store, the notifier and the scheduler into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.clock import SystemClock
from ..core.ports import Notifier
from ..core.state import AppState
from ..notify.log_notifier import LogNotifier
from ..notify.sendgrid import SendGridNotifier
from ..reminders.driver import ReminderScheduler
from ..reminders.store import ReminderStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_notifier(settings) -> Notifier:
    """SendGrid when an API key is configured, otherwise log-only."""
    try:
        return SendGridNotifier.from_settings(settings)
    except RuntimeError:
        logger.warning(
            "No email provider configured (TASKIO_SENDGRID_API_KEY); reminders will only be logged."
        )
        return LogNotifier(frontend_url=settings.frontend_url, max_reminders=settings.max_reminders)


def create_initial_state(*, settings=None, notifier: Notifier | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = ReminderStore(settings.tasks_db_path)
    if notifier is None:
        notifier = create_notifier(settings)

    scheduler = ReminderScheduler.from_settings(settings, store, notifier, clock=SystemClock())

    return AppState(
        settings=settings,
        store=store,
        notifier=notifier,
        scheduler=scheduler,
    )

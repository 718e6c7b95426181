# src/taskio_reminders/reminders/alerts.py

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.ports import Notifier, ReminderRepo
from .models import User

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AlertToggleResult:
    user: User
    first_time: bool
    welcome_sent: bool

    @property
    def message(self) -> str:
        state = "enabled" if self.user.alerts_enabled else "disabled"
        return f"Task alerts {state} successfully"


async def set_alerts(
    repo: ReminderRepo,
    notifier: Notifier,
    user_id: str,
    enabled: bool,
    *,
    now_ts: float | None = None,
) -> AlertToggleResult:
    """
    Turn overdue reminders on/off for a user.

    The first time alerts are turned on the user gets a welcome email; failing to
    send it is logged and does not undo the toggle.
    Raises LookupError for an unknown user.
    """
    user, first_time = repo.set_alerts_enabled(user_id, enabled, now_ts=now_ts)
    logger.info("Alerts %s for user %s", "enabled" if enabled else "disabled", user_id)

    welcome_sent = False
    if first_time:
        try:
            await notifier.send_welcome(to_address=user.email, recipient_name=user.name)
            welcome_sent = True
            logger.info("Welcome alerts email sent to %s", user.email)
        except Exception:
            logger.exception("Failed to send welcome alerts email to %s", user.email)

    return AlertToggleResult(user=user, first_time=first_time, welcome_sent=welcome_sent)

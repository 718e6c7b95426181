# src/taskio_reminders/notify/log_notifier.py

from __future__ import annotations

import logging

from ..reminders.policy import MAX_REMINDERS
from .messages import EmailMessage, compose_reminder, compose_welcome

logger = logging.getLogger(__name__)


class LogNotifier:
    """
    Offline notifier used when no email provider is configured.

    Composes the same messages a real transport would send and writes them
    to the log instead. Always succeeds.
    """

    def __init__(
        self,
        *,
        frontend_url: str = "http://localhost:5173",
        max_reminders: int = MAX_REMINDERS,
    ) -> None:
        self.frontend_url = frontend_url
        self.max_reminders = int(max_reminders)
        self.sent: list[EmailMessage] = []

    def _emit(self, msg: EmailMessage) -> None:
        self.sent.append(msg)
        logger.info("EMAIL (offline) to=%s subject=%r", msg.to_address, msg.subject)
        logger.debug("EMAIL body:\n%s", msg.text)

    async def send_reminder(
        self,
        *,
        to_address: str,
        recipient_name: str,
        task_title: str,
        days_overdue: int,
    ) -> None:
        self._emit(
            compose_reminder(
                to_address=to_address,
                recipient_name=recipient_name,
                task_title=task_title,
                days_overdue=days_overdue,
                frontend_url=self.frontend_url,
                max_reminders=self.max_reminders,
            )
        )

    async def send_welcome(self, *, to_address: str, recipient_name: str) -> None:
        self._emit(
            compose_welcome(
                to_address=to_address,
                recipient_name=recipient_name,
                frontend_url=self.frontend_url,
                max_reminders=self.max_reminders,
            )
        )

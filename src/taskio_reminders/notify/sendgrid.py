# src/taskio_reminders/notify/sendgrid.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.ports import NotifierError
from ..reminders.policy import MAX_REMINDERS
from .messages import SUPPORT_EMAIL, EmailMessage, compose_reminder, compose_welcome

logger = logging.getLogger(__name__)

SEND_PATH = "/v3/mail/send"


class SendGridNotifier:
    """
    Email notifier backed by the SendGrid v3 mail API.

    Any non-2xx response or transport error is raised as NotifierError,
    so the dispatcher can leave the task untouched and retry on a later tick.
    """

    def __init__(
        self,
        *,
        api_key: str,
        from_email: str,
        from_name: str,
        frontend_url: str,
        base_url: str = "https://api.sendgrid.com",
        timeout_seconds: float = 20.0,
        client: httpx.AsyncClient | None = None,
        max_reminders: int = MAX_REMINDERS,
    ) -> None:
        if not api_key or not api_key.strip():
            raise RuntimeError("SendGrid API key is not set. Set TASKIO_SENDGRID_API_KEY in your .env.")

        self._api_key = api_key.strip()
        self.from_email = from_email
        self.from_name = from_name
        self.frontend_url = frontend_url
        self.max_reminders = int(max_reminders)
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds, connect=5.0),
        )

    @classmethod
    def from_settings(cls, settings, **kwargs) -> SendGridNotifier:
        return cls(
            api_key=settings.sendgrid_api_key or "",
            from_email=settings.from_email,
            from_name=settings.from_name,
            frontend_url=settings.frontend_url,
            base_url=settings.sendgrid_base_url,
            timeout_seconds=settings.send_timeout_seconds,
            max_reminders=settings.max_reminders,
            **kwargs,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _payload(self, msg: EmailMessage, category: str) -> dict[str, Any]:
        return {
            "personalizations": [{"to": [{"email": msg.to_address}], "subject": msg.subject}],
            "from": {"email": self.from_email, "name": self.from_name},
            "reply_to": {"email": SUPPORT_EMAIL, "name": "Taskio Support"},
            "content": [
                {"type": "text/plain", "value": msg.text},
                {"type": "text/html", "value": msg.html},
            ],
            "headers": {
                "X-Mailer": "Taskio Email Service",
                "List-Unsubscribe": f"<mailto:{SUPPORT_EMAIL}?subject=unsubscribe>",
            },
            "categories": [category, "transactional"],
            "custom_args": {"email_type": category, "app": "taskio"},
        }

    async def _send(self, msg: EmailMessage, category: str) -> None:
        try:
            resp = await self._client.post(
                SEND_PATH,
                json=self._payload(msg, category),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            raise NotifierError(f"SendGrid request failed: {e.__class__.__name__}: {e}") from e

        if resp.is_success:
            logger.debug("SendGrid accepted %s email to %s (status=%s)", category, msg.to_address, resp.status_code)
            return

        body = (resp.text or "")[:300]
        raise NotifierError(f"SendGrid API error: {resp.status_code} {resp.reason_phrase} - {body}")

    async def send_reminder(
        self,
        *,
        to_address: str,
        recipient_name: str,
        task_title: str,
        days_overdue: int,
    ) -> None:
        msg = compose_reminder(
            to_address=to_address,
            recipient_name=recipient_name,
            task_title=task_title,
            days_overdue=days_overdue,
            frontend_url=self.frontend_url,
            max_reminders=self.max_reminders,
        )
        await self._send(msg, "task-reminder")

    async def send_welcome(self, *, to_address: str, recipient_name: str) -> None:
        msg = compose_welcome(
            to_address=to_address,
            recipient_name=recipient_name,
            frontend_url=self.frontend_url,
            max_reminders=self.max_reminders,
        )
        await self._send(msg, "alerts-welcome")

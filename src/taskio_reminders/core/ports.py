# src/taskio_reminders/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder core.

The scheduler depends on Protocols instead of concrete implementations.
This keeps the store, the email transport and the time source swappable
and lets tests drive the clock by hand.
"""

from typing import Any, Awaitable, Protocol


class Clock(Protocol):
    """Time source. Returns UTC epoch seconds."""
    def now(self) -> float: ...


class NotifierError(RuntimeError):
    """A notifier rejected or could not deliver a message."""


class Notifier(Protocol):
    """
    Send-one-message capability (email or otherwise).

    A failed send must be observable as a raised exception (NotifierError,
    timeout, transport error); returning normally means the message went out.
    """

    def send_reminder(
            self,
            *,
            to_address: str,
            recipient_name: str,
            task_title: str,
            days_overdue: int,
    ) -> Awaitable[None]: ...

    def send_welcome(self, *, to_address: str, recipient_name: str) -> Awaitable[None]: ...


class ReminderRepo(Protocol):
    # Scheduler API
    def list_overdue_candidates(self, *, now_ts: float) -> list[Any]: ...
    def record_reminder_sent(self, task_id: int, *, sent_at: float) -> None: ...

    # Alert preference API
    def get_user(self, user_id: str) -> Any | None: ...
    def set_alerts_enabled(
            self,
            user_id: str,
            enabled: bool,
            *,
            now_ts: float | None = None,
    ) -> tuple[Any, bool]: ...

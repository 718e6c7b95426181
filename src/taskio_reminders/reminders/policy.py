# src/taskio_reminders/reminders/policy.py

"""
Reminder policy: thresholds and the time arithmetic behind them.

All timestamps are UTC epoch seconds (floats), so "days overdue" is plain
arithmetic and does not depend on the server's local timezone.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .models import ReminderCandidate, TaskStatus

SECONDS_PER_HOUR = 60 * 60
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR

MAX_REMINDERS = 3
COOLDOWN_SECONDS = 24 * SECONDS_PER_HOUR
OVERDUE_MIN_DAYS = 1
OVERDUE_MAX_DAYS = 3


@dataclass(frozen=True, slots=True)
class ReminderPolicy:
    max_reminders: int = MAX_REMINDERS
    cooldown_seconds: float = COOLDOWN_SECONDS
    overdue_min_days: int = OVERDUE_MIN_DAYS
    overdue_max_days: int = OVERDUE_MAX_DAYS

    @staticmethod
    def from_settings(settings) -> "ReminderPolicy":
        return ReminderPolicy(
            max_reminders=int(getattr(settings, "max_reminders", MAX_REMINDERS)),
            cooldown_seconds=float(getattr(settings, "cooldown_hours", 24.0)) * SECONDS_PER_HOUR,
            overdue_min_days=int(getattr(settings, "overdue_min_days", OVERDUE_MIN_DAYS)),
            overdue_max_days=int(getattr(settings, "overdue_max_days", OVERDUE_MAX_DAYS)),
        )


DEFAULT_POLICY = ReminderPolicy()


def days_overdue(due_at: float, now_ts: float) -> int:
    """
    ceil((now - due) / 1 day), floored at 0.

    Anything late by more than 0s and at most 24h is day 1; due now or in the
    future is day 0.
    """
    diff_days = (float(now_ts) - float(due_at)) / SECONDS_PER_DAY
    return max(0, math.ceil(diff_days))


def cooldown_elapsed(
    last_sent: float | None,
    now_ts: float,
    cooldown_seconds: float = COOLDOWN_SECONDS,
) -> bool:
    if last_sent is None:
        return True
    return (float(now_ts) - float(last_sent)) >= cooldown_seconds


def in_overdue_window(days: int, policy: ReminderPolicy = DEFAULT_POLICY) -> bool:
    return policy.overdue_min_days <= days <= policy.overdue_max_days


def is_eligible(
    candidate: ReminderCandidate,
    now_ts: float,
    policy: ReminderPolicy = DEFAULT_POLICY,
) -> bool:
    """All reminder rules at once. Pure: no I/O, no clock reads."""
    if candidate.status == TaskStatus.DONE:
        return False
    if candidate.due_at is None or not candidate.due_at < now_ts:
        return False
    if not candidate.alerts_enabled:
        return False
    if int(candidate.reminder_count or 0) >= policy.max_reminders:
        return False
    if not cooldown_elapsed(candidate.last_reminder_sent, now_ts, policy.cooldown_seconds):
        return False
    return in_overdue_window(days_overdue(candidate.due_at, now_ts), policy)

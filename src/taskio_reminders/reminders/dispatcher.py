# src/taskio_reminders/reminders/dispatcher.py

from __future__ import annotations

"""
Reminder dispatcher.

Sends one reminder per eligible candidate, strictly one at a time:
- notifier succeeds -> bump reminder_count / last_reminder_sent for that task
- notifier fails    -> leave the task untouched (it stays eligible), move on
- fixed pause between sends, also after failures, to stay under provider rate limits
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from ..core.ports import Clock, Notifier, ReminderRepo
from .models import PassReport, ReminderCandidate
from .policy import days_overdue

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


async def dispatch_reminders(
        candidates: Sequence[ReminderCandidate],
        *,
        repo: ReminderRepo,
        notifier: Notifier,
        clock: Clock,
        sleep: SleepFn = asyncio.sleep,
        send_timeout_seconds: float = 30.0,
        delay_seconds: float = 1.0,
        report: PassReport | None = None,
        now_ts: float | None = None,
) -> PassReport:
    if report is None:
        report = PassReport(started_at=clock.now())
    report.candidates = len(candidates)

    # days_overdue is measured at selection time, not after the pauses between sends.
    selected_at = clock.now() if now_ts is None else float(now_ts)

    timeout_s = max(0.1, float(send_timeout_seconds))
    delay_s = max(0.0, float(delay_seconds))

    for idx, c in enumerate(candidates):
        if idx > 0 and delay_s > 0:
            await sleep(delay_s)

        due_at = c.due_at if c.due_at is not None else selected_at
        days = days_overdue(due_at, selected_at)

        try:
            await asyncio.wait_for(
                notifier.send_reminder(
                    to_address=c.user_email,
                    recipient_name=c.user_name,
                    task_title=c.title,
                    days_overdue=days,
                ),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError:
            report.failed += 1
            logger.error(
                "Reminder send timed out after %.1fs task_id=%s title=%r to=%s",
                timeout_s,
                c.task_id,
                c.title,
                c.user_email,
            )
            continue
        except Exception:
            report.failed += 1
            logger.exception(
                "Reminder send failed task_id=%s title=%r to=%s", c.task_id, c.title, c.user_email
            )
            continue

        try:
            repo.record_reminder_sent(c.task_id, sent_at=clock.now())
        except Exception:
            # The email is out but the cooldown was not recorded: next tick may send it again.
            report.unrecorded += 1
            logger.exception(
                "Reminder SENT but bookkeeping update FAILED task_id=%s to=%s; "
                "the task may be re-notified on the next tick",
                c.task_id,
                c.user_email,
            )
            continue

        report.sent += 1
        logger.info(
            "Reminder sent for task %s %r to %s (%d day%s overdue)",
            c.task_id,
            c.title,
            c.user_email,
            days,
            "" if days == 1 else "s",
        )

    report.finished_at = clock.now()
    return report

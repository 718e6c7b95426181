# src/taskio_reminders/reminders/selector.py

from __future__ import annotations

import logging

from ..core.ports import ReminderRepo
from .models import ReminderCandidate
from .policy import DEFAULT_POLICY, ReminderPolicy, is_eligible

logger = logging.getLogger(__name__)


def select_eligible(
    repo: ReminderRepo,
    *,
    now_ts: float,
    policy: ReminderPolicy = DEFAULT_POLICY,
) -> list[ReminderCandidate]:
    """
    Return the (task, owner) pairs that should get a reminder at now_ts.

    The store pre-filters in SQL; every rule is re-checked here so the policy
    lives in one place. Oldest due date first, ties by task id, each task once.

    Store read errors propagate: the caller must not act on a partial list.
    """
    rows = repo.list_overdue_candidates(now_ts=now_ts)

    seen: set[int] = set()
    out: list[ReminderCandidate] = []
    for c in rows:
        if c.task_id in seen:
            continue
        if not is_eligible(c, now_ts, policy):
            continue
        seen.add(c.task_id)
        out.append(c)

    out.sort(key=lambda c: (c.due_at, c.task_id))
    logger.debug("Selector: %d rows, %d eligible (now=%.0f)", len(rows), len(out), now_ts)
    return out

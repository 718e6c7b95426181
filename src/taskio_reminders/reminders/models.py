# src/taskio_reminders/reminders/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle status, as written by the CRUD side of the app.

    Only DONE matters to the scheduler: every other status is a candidate.
    """

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(raw)
        except ValueError:
            return cls.TODO


@dataclass(slots=True)
class User:
    id: str
    email: str
    name: str
    alerts_enabled: bool
    alerts_activated_at: float | None
    created_at: float


@dataclass(slots=True)
class Task:
    id: int
    user_id: str
    title: str
    status: TaskStatus
    due_at: float | None
    created_at: float
    updated_at: float

    # Scheduler-private bookkeeping.
    reminder_count: int = 0
    last_reminder_sent: float | None = None


@dataclass(slots=True, frozen=True)
class ReminderCandidate:
    """A task joined to its owner: one row of the overdue query."""

    task_id: int
    title: str
    due_at: float | None
    status: TaskStatus
    user_email: str
    user_name: str
    alerts_enabled: bool
    reminder_count: int
    last_reminder_sent: float | None


@dataclass(slots=True)
class PassReport:
    started_at: float
    finished_at: float | None = None
    candidates: int = 0
    sent: int = 0
    failed: int = 0
    unrecorded: int = 0  # sent, but the bookkeeping write failed

    def summary(self) -> str:
        return (
            f"{self.sent} sent, {self.failed} failed, {self.unrecorded} unrecorded "
            f"({self.candidates} eligible)"
        )


@dataclass(slots=True, frozen=True)
class ManualCheckResult:
    success: bool
    message: str

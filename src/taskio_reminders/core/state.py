# src/taskio_reminders/core/state.py

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from ..reminders.driver import ReminderScheduler, SchedulerBackgroundRunner
    from ..reminders.store import ReminderStore
    from .ports import Notifier

T = TypeVar("T")


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    store: ReminderStore
    notifier: Notifier
    scheduler: ReminderScheduler

    # Set once the background scheduler thread is up.
    runner: SchedulerBackgroundRunner | None = None

    def run_async(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """
        Run a coroutine from synchronous code (console commands).

        Goes through the scheduler's event loop when it is running, so the
        notifier's HTTP client and the pass lock stay on one loop.
        """
        if self.runner is not None:
            fut = asyncio.run_coroutine_threadsafe(coro, self.runner.loop)
            return fut.result(timeout=timeout)
        return asyncio.run(coro)

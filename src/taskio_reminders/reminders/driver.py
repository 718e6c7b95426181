# src/taskio_reminders/reminders/driver.py

from __future__ import annotations

"""
Reminder scheduler driver.

Three ways a pass (select -> dispatch) gets started:
- timer: every interval_seconds, aligned to the epoch (hourly => top of the hour, UTC)
- startup: once, startup_delay_seconds after run_forever() begins
- manual: trigger_manual(), on demand, reports success/failure of the pass

All of them share one lock, so passes never overlap. The driver keeps no durable
state: everything that matters (reminder_count, last_reminder_sent) is in the store.

To stop the scheduler, cancel the run_forever() coroutine/task.
"""

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..core.clock import SystemClock
from ..core.ports import Clock, Notifier, ReminderRepo
from .dispatcher import SleepFn, dispatch_reminders
from .models import ManualCheckResult, PassReport
from .policy import DEFAULT_POLICY, ReminderPolicy
from .selector import select_eligible

logger = logging.getLogger(__name__)


def seconds_until_next_tick(now_ts: float, interval_seconds: float) -> float:
    """Delay until the next multiple of interval_seconds. Always in (0, interval]."""
    interval = float(interval_seconds)
    if interval <= 0:
        raise ValueError("interval_seconds must be positive")
    remainder = float(now_ts) % interval
    delay = interval - remainder
    return delay if delay > 0 else interval


class ReminderScheduler:
    def __init__(
            self,
            repo: ReminderRepo,
            notifier: Notifier,
            *,
            clock: Clock | None = None,
            sleep: SleepFn = asyncio.sleep,
            policy: ReminderPolicy = DEFAULT_POLICY,
            interval_seconds: float = 3600.0,
            startup_delay_seconds: float = 30.0,
            send_timeout_seconds: float = 30.0,
            dispatch_delay_seconds: float = 1.0,
    ) -> None:
        self.repo = repo
        self.notifier = notifier
        self.clock: Clock = clock or SystemClock()
        self.policy = policy
        self.interval_seconds = float(interval_seconds)
        self.startup_delay_seconds = max(0.0, float(startup_delay_seconds))
        self.send_timeout_seconds = float(send_timeout_seconds)
        self.dispatch_delay_seconds = float(dispatch_delay_seconds)

        self._sleep = sleep
        self._lock = asyncio.Lock()

        self.passes_run = 0
        self.last_report: PassReport | None = None

        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

    @classmethod
    def from_settings(cls, settings, repo: ReminderRepo, notifier: Notifier, **kwargs) -> ReminderScheduler:
        return cls(
            repo,
            notifier,
            policy=ReminderPolicy.from_settings(settings),
            interval_seconds=settings.check_interval_seconds,
            startup_delay_seconds=settings.startup_delay_seconds,
            send_timeout_seconds=settings.send_timeout_seconds,
            dispatch_delay_seconds=settings.dispatch_delay_seconds,
            **kwargs,
        )

    @property
    def is_running_pass(self) -> bool:
        return self._lock.locked()

    async def run_pass(self) -> PassReport:
        """
        One full select -> dispatch pass. Waits for any pass already in progress.

        Raises if the store cannot be read; nothing is dispatched in that case.
        """
        async with self._lock:
            now_ts = self.clock.now()
            report = PassReport(started_at=now_ts)

            candidates = select_eligible(self.repo, now_ts=now_ts, policy=self.policy)
            if not candidates:
                logger.info("No overdue tasks requiring reminders")
                report.finished_at = self.clock.now()
            else:
                logger.info("Found %d overdue tasks requiring reminders", len(candidates))
                await dispatch_reminders(
                    candidates,
                    repo=self.repo,
                    notifier=self.notifier,
                    clock=self.clock,
                    sleep=self._sleep,
                    send_timeout_seconds=self.send_timeout_seconds,
                    delay_seconds=self.dispatch_delay_seconds,
                    report=report,
                    now_ts=now_ts,
                )
                logger.info("Reminder pass complete: %s", report.summary())

            self.passes_run += 1
            self.last_report = report
            return report

    async def _guarded_pass(self, trigger: str) -> PassReport | None:
        """Run a pass; any error is logged and the tick becomes a no-op."""
        logger.info("Reminder pass triggered (%s)", trigger)
        try:
            return await self.run_pass()
        except Exception:
            logger.exception("Reminder pass failed (trigger=%s); will retry on next tick", trigger)
            return None

    async def trigger_manual(self) -> ManualCheckResult:
        logger.info("Manual reminder check triggered")
        try:
            report = await self.run_pass()
        except Exception as e:
            logger.exception("Manual reminder check failed")
            return ManualCheckResult(success=False, message=f"Manual reminder check failed: {e}")
        return ManualCheckResult(
            success=True,
            message=f"Manual reminder check completed successfully: {report.summary()}",
        )

    async def _startup_pass(self) -> None:
        if self.startup_delay_seconds > 0:
            await self._sleep(self.startup_delay_seconds)
        await self._guarded_pass("startup")

    async def run_forever(self) -> None:
        logger.info(
            "Reminder scheduler started: every %.0fs (aligned), startup pass in %.0fs",
            self.interval_seconds,
            self.startup_delay_seconds,
        )
        startup = asyncio.create_task(self._startup_pass())
        try:
            while True:
                delay = seconds_until_next_tick(self.clock.now(), self.interval_seconds)
                logger.debug("Next reminder tick in %.1fs", delay)
                await self._sleep(delay)
                await self._guarded_pass("timer")
        finally:
            startup.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await startup
            logger.info("Reminder scheduler stopped")


@dataclass
class SchedulerBackgroundRunner:
    """run_forever() on its own event loop in a daemon thread (the console REPL blocks)."""

    scheduler: ReminderScheduler
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    task: asyncio.Task

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.task.cancel)
        except Exception:
            logger.debug("Failed to signal scheduler stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_scheduler_in_background(scheduler: ReminderScheduler) -> SchedulerBackgroundRunner | None:
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        task = loop.create_task(scheduler.run_forever())

        holder["loop"] = loop
        holder["task"] = task
        ready.set()

        try:
            with contextlib.suppress(asyncio.CancelledError):
                loop.run_until_complete(task)
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="reminder-scheduler", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    task = holder.get("task")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(task, asyncio.Task):
        logger.error("Scheduler thread did not initialize properly.")
        return None

    logger.info("Reminder scheduler background thread started.")
    return SchedulerBackgroundRunner(scheduler=scheduler, thread=t, loop=loop, task=task)

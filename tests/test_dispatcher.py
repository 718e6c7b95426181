# tests/test_dispatcher.py

from __future__ import annotations

import asyncio

import pytest

from taskio_reminders.reminders.dispatcher import dispatch_reminders
from taskio_reminders.reminders.selector import select_eligible

from .fakes import HOUR, NOW, FakeClock, FakeNotifier, FakeSleep, InMemoryReminderRepo


def _repo_with_tasks(*titles_and_overdue: tuple[str, float]) -> InMemoryReminderRepo:
    repo = InMemoryReminderRepo()
    repo.add_user("ann")
    for title, overdue_hours in titles_and_overdue:
        repo.add_task("ann", title=title, due_at=NOW - overdue_hours * HOUR)
    return repo


@pytest.mark.asyncio
async def test_success_records_exactly_one_reminder_per_task() -> None:
    clock = FakeClock()
    repo = _repo_with_tasks(("a", 30), ("b", 50))
    notifier = FakeNotifier()

    candidates = select_eligible(repo, now_ts=clock.now())
    report = await dispatch_reminders(
        candidates, repo=repo, notifier=notifier, clock=clock, sleep=FakeSleep(), delay_seconds=1.0
    )

    assert report.sent == 2 and report.failed == 0
    # oldest overdue goes out first
    assert [s.task_title for s in notifier.sent] == ["b", "a"]
    assert [s.days_overdue for s in notifier.sent] == [3, 2]
    for t in repo.tasks.values():
        assert t.reminder_count == 1
        assert t.last_reminder_sent == clock.now()


@pytest.mark.asyncio
async def test_failed_send_leaves_task_untouched_and_batch_continues() -> None:
    clock = FakeClock()
    repo = _repo_with_tasks(("broken", 40), ("fine", 30))
    notifier = FakeNotifier(fail_titles={"broken"})

    report = await dispatch_reminders(
        select_eligible(repo, now_ts=clock.now()),
        repo=repo,
        notifier=notifier,
        clock=clock,
        sleep=FakeSleep(),
    )

    assert (report.sent, report.failed) == (1, 1)
    broken, fine = repo.tasks[1], repo.tasks[2]
    assert broken.reminder_count == 0 and broken.last_reminder_sent is None
    assert fine.reminder_count == 1
    # never started a cooldown, so still eligible on the next tick
    assert [c.title for c in select_eligible(repo, now_ts=clock.now() + HOUR)] == ["broken"]


@pytest.mark.asyncio
async def test_delay_between_sends_applies_after_failures_too() -> None:
    clock = FakeClock()
    repo = _repo_with_tasks(("a", 70), ("b", 50), ("c", 30))
    notifier = FakeNotifier(fail_titles={"a", "b"})
    sleep = FakeSleep()

    await dispatch_reminders(
        select_eligible(repo, now_ts=clock.now()),
        repo=repo,
        notifier=notifier,
        clock=clock,
        sleep=sleep,
        delay_seconds=1.0,
    )

    assert notifier.attempts == ["a", "b", "c"]
    assert sleep.calls == [1.0, 1.0]


@pytest.mark.asyncio
async def test_send_timeout_counts_as_failure() -> None:
    class SlowNotifier(FakeNotifier):
        async def send_reminder(self, **kwargs) -> None:
            await asyncio.sleep(10)

    clock = FakeClock()
    repo = _repo_with_tasks(("slow", 30))

    report = await dispatch_reminders(
        select_eligible(repo, now_ts=clock.now()),
        repo=repo,
        notifier=SlowNotifier(),
        clock=clock,
        sleep=FakeSleep(),
        send_timeout_seconds=0.1,
    )

    assert report.failed == 1 and report.sent == 0
    assert repo.tasks[1].reminder_count == 0


@pytest.mark.asyncio
async def test_store_write_failure_after_send_is_counted_and_batch_continues(caplog) -> None:
    clock = FakeClock()
    repo = _repo_with_tasks(("a", 40), ("b", 30))
    repo.fail_writes = True
    notifier = FakeNotifier()

    with caplog.at_level("ERROR"):
        report = await dispatch_reminders(
            select_eligible(repo, now_ts=clock.now()),
            repo=repo,
            notifier=notifier,
            clock=clock,
            sleep=FakeSleep(),
        )

    assert len(notifier.sent) == 2
    assert report.unrecorded == 2 and report.sent == 0
    assert "re-notified" in caplog.text


@pytest.mark.asyncio
async def test_days_overdue_is_fixed_at_selection_time() -> None:
    clock = FakeClock()
    repo = InMemoryReminderRepo()
    repo.add_user("ann")
    repo.add_task("ann", title="oldest", due_at=NOW - 72 * HOUR)
    repo.add_task("ann", title="edge", due_at=NOW - 72 * HOUR + 0.5)
    notifier = FakeNotifier()

    selected_at = clock.now()
    await dispatch_reminders(
        select_eligible(repo, now_ts=selected_at),
        repo=repo,
        notifier=notifier,
        clock=clock,
        sleep=FakeSleep(clock),
        delay_seconds=1.0,
        now_ts=selected_at,
    )

    # the pause before "edge" moves the clock past 72h, but it was selected on day 3
    assert clock.now() == NOW + 1.0
    assert [s.task_title for s in notifier.sent] == ["oldest", "edge"]
    assert [s.days_overdue for s in notifier.sent] == [3, 3]

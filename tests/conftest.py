# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskio_reminders.core.state import AppState
from taskio_reminders.reminders.driver import ReminderScheduler
from taskio_reminders.reminders.store import ReminderStore

from .fakes import FakeClock, FakeNotifier, FakeSleep


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap/driver.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's environment.
    """
    return SimpleNamespace(
        app_name="taskio-reminders-test",
        log_level="DEBUG",
        console_enabled=False,
        sendgrid_api_key=None,
        sendgrid_base_url="https://api.sendgrid.test",
        from_email="noreply@example.com",
        from_name="Taskio Test",
        frontend_url="https://app.example.com",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        check_interval_seconds=3600.0,
        startup_delay_seconds=30.0,
        dispatch_delay_seconds=1.0,
        send_timeout_seconds=5.0,
        max_reminders=3,
        cooldown_hours=24.0,
        overdue_min_days=1,
        overdue_max_days=3,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(settings: SimpleNamespace) -> ReminderStore:
    return ReminderStore(settings.tasks_db_path)


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    store: ReminderStore,
    notifier: FakeNotifier,
    clock: FakeClock,
) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: the store is the real SQLite ReminderStore, its queries are part of
    what we want to test.
    """
    scheduler = ReminderScheduler.from_settings(
        settings, store, notifier, clock=clock, sleep=FakeSleep(clock)
    )
    return AppState(settings=settings, store=store, notifier=notifier, scheduler=scheduler)

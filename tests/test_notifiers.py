# tests/test_notifiers.py

from __future__ import annotations

import json

import httpx
import pytest

from taskio_reminders.core.ports import NotifierError
from taskio_reminders.notify.log_notifier import LogNotifier
from taskio_reminders.notify.messages import compose_reminder, compose_welcome, reminder_subject
from taskio_reminders.notify.sendgrid import SEND_PATH, SendGridNotifier

BASE = "https://api.sendgrid.test"


def _notifier(handler) -> SendGridNotifier:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE)
    return SendGridNotifier(
        api_key="SG.test-key",
        from_email="noreply@example.com",
        from_name="Taskio",
        frontend_url="https://app.example.com/",
        client=client,
    )


def test_reminder_subject_pluralizes_days() -> None:
    assert reminder_subject("Pay rent", 1) == 'Reminder: "Pay rent" is 1 day overdue'
    assert reminder_subject("Pay rent", 3) == 'Reminder: "Pay rent" is 3 days overdue'


def test_compose_reminder_includes_day_and_links() -> None:
    msg = compose_reminder(
        to_address="ann@example.com",
        recipient_name="Ann",
        task_title="Pay <rent>",
        days_overdue=2,
        frontend_url="https://app.example.com/",
    )

    assert msg.to_address == "ann@example.com"
    assert "Hi Ann!" in msg.text
    assert "This is reminder 2 of 3" in msg.text
    assert "Complete your task: https://app.example.com/tasks" in msg.text
    assert "https://app.example.com/profile" in msg.text
    # titles are escaped in HTML but kept verbatim in text
    assert "Pay &lt;rent&gt;" in msg.html
    assert "Pay <rent>" in msg.text


def test_compose_welcome_without_name() -> None:
    msg = compose_welcome(to_address="x@example.com", recipient_name="", frontend_url="https://app.example.com")
    assert msg.subject == "Task Reminders Activated - Welcome to Taskio Alerts"
    assert "Hi there!" in msg.text
    assert "Maximum 3 reminders per task" in msg.text


@pytest.mark.asyncio
async def test_sendgrid_posts_reminder() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    notifier = _notifier(handler)
    try:
        await notifier.send_reminder(
            to_address="ann@example.com",
            recipient_name="Ann",
            task_title="Pay rent",
            days_overdue=1,
        )
    finally:
        await notifier.aclose()

    assert len(seen) == 1
    req = seen[0]
    assert req.method == "POST"
    assert req.url.path == SEND_PATH
    assert req.headers["Authorization"] == "Bearer SG.test-key"

    body = json.loads(req.content)
    assert body["personalizations"][0]["to"] == [{"email": "ann@example.com"}]
    assert body["personalizations"][0]["subject"] == 'Reminder: "Pay rent" is 1 day overdue'
    assert body["from"] == {"email": "noreply@example.com", "name": "Taskio"}
    assert body["categories"][0] == "task-reminder"
    assert [c["type"] for c in body["content"]] == ["text/plain", "text/html"]


@pytest.mark.asyncio
async def test_sendgrid_error_status_raises_notifier_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text='{"errors":[{"message":"bad key"}]}')

    notifier = _notifier(handler)
    try:
        with pytest.raises(NotifierError, match="401"):
            await notifier.send_welcome(to_address="ann@example.com", recipient_name="Ann")
    finally:
        await notifier.aclose()


@pytest.mark.asyncio
async def test_sendgrid_transport_error_raises_notifier_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    notifier = _notifier(handler)
    try:
        with pytest.raises(NotifierError, match="ConnectError"):
            await notifier.send_reminder(
                to_address="ann@example.com",
                recipient_name="Ann",
                task_title="t",
                days_overdue=1,
            )
    finally:
        await notifier.aclose()


def test_sendgrid_requires_api_key() -> None:
    with pytest.raises(RuntimeError):
        SendGridNotifier(
            api_key="  ",
            from_email="noreply@example.com",
            from_name="Taskio",
            frontend_url="https://app.example.com",
        )


@pytest.mark.asyncio
async def test_log_notifier_records_messages() -> None:
    notifier = LogNotifier(frontend_url="https://app.example.com")

    await notifier.send_reminder(
        to_address="ann@example.com", recipient_name="Ann", task_title="t", days_overdue=3
    )
    await notifier.send_welcome(to_address="ann@example.com", recipient_name="Ann")

    assert [m.subject for m in notifier.sent] == [
        'Reminder: "t" is 3 days overdue',
        "Task Reminders Activated - Welcome to Taskio Alerts",
    ]
    assert "This is reminder 3 of 3" in notifier.sent[0].text


def test_messages_use_configured_reminder_limit() -> None:
    reminder = compose_reminder(
        to_address="ann@example.com",
        recipient_name="Ann",
        task_title="t",
        days_overdue=2,
        frontend_url="https://app.example.com",
        max_reminders=5,
    )
    welcome = compose_welcome(
        to_address="ann@example.com",
        recipient_name="Ann",
        frontend_url="https://app.example.com",
        max_reminders=5,
    )

    assert "This is reminder 2 of 5" in reminder.text
    assert "of 5" in reminder.html
    assert "Maximum 5 reminders per task" in welcome.text
    assert "of 3" not in reminder.text


@pytest.mark.asyncio
async def test_notifiers_from_settings_carry_reminder_limit(settings) -> None:
    settings.max_reminders = 2
    settings.sendgrid_api_key = "SG.key"

    sendgrid = SendGridNotifier.from_settings(settings)
    await sendgrid.aclose()
    assert sendgrid.max_reminders == 2

    notifier = LogNotifier(frontend_url=settings.frontend_url, max_reminders=2)
    await notifier.send_reminder(
        to_address="ann@example.com", recipient_name="Ann", task_title="t", days_overdue=1
    )
    await notifier.send_welcome(to_address="ann@example.com", recipient_name="Ann")
    assert "This is reminder 1 of 2" in notifier.sent[0].text
    assert "Maximum 2 reminders per task" in notifier.sent[1].text

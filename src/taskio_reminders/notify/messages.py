# src/taskio_reminders/notify/messages.py

"""
Email composition for reminder and welcome messages.

Each message has a subject, a plain-text body and an HTML body; transports
decide how to ship them.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

from ..reminders.policy import MAX_REMINDERS

SUPPORT_EMAIL = "verifytaskio@gmail.com"

_REMINDER_MESSAGES = {
    1: "Don't worry, we all miss deadlines sometimes! Here's a gentle reminder to help you get back on track.",
    2: "Your task is still waiting for you. A little progress today can make a big difference!",
    3: "This is your final reminder for this task. You've got this - let's finish strong!",
}

_ENCOURAGEMENTS = {
    1: "You're doing great! Just need to tackle this one task.",
    2: "Keep going! Every completed task is a step forward.",
    3: "Final push! Complete this task and feel the satisfaction.",
}


@dataclass(slots=True, frozen=True)
class EmailMessage:
    to_address: str
    subject: str
    text: str
    html: str


def _days_label(days: int) -> str:
    return f"{days} day{'s' if days != 1 else ''}"


def _pick(table: dict[int, str], days: int) -> str:
    key = min(max(days, 1), max(table))
    return table[key]


def reminder_subject(task_title: str, days_overdue: int) -> str:
    return f'Reminder: "{task_title}" is {_days_label(days_overdue)} overdue'


def compose_reminder(
    *,
    to_address: str,
    recipient_name: str,
    task_title: str,
    days_overdue: int,
    frontend_url: str,
    max_reminders: int = MAX_REMINDERS,
) -> EmailMessage:
    days = int(days_overdue)
    base = frontend_url.rstrip("/")
    message = _pick(_REMINDER_MESSAGES, days)
    encouragement = _pick(_ENCOURAGEMENTS, days)
    label = _days_label(days)
    name = recipient_name or "there"

    text = (
        f"Task Reminder - {task_title}\n"
        "\n"
        f"Hi {name}!\n"
        "\n"
        f"{message}\n"
        "\n"
        f"Task: {task_title}\n"
        f"Status: {label} overdue\n"
        "\n"
        f"Complete your task: {base}/tasks\n"
        "\n"
        f"This is reminder {days} of {max_reminders}. "
        "You can disable reminders anytime in your profile settings.\n"
        "\n"
        f"Manage preferences: {base}/profile\n"
        f"Contact: {SUPPORT_EMAIL}\n"
    )

    html = f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Task Reminder - {escape(task_title)}</title></head>
<body style="font-family: 'Segoe UI', Tahoma, sans-serif; color: #333; background: #f8fafc;">
  <div style="max-width: 600px; margin: 0 auto; background: white; border-radius: 12px;">
    <div style="background: #f59e0b; color: white; padding: 30px; text-align: center;">
      <h1>Task Reminder</h1>
      <p>{escape(encouragement)}</p>
    </div>
    <div style="padding: 30px;">
      <h2>Hi {escape(name)}!</h2>
      <p>{escape(message)}</p>
      <div style="background: #fef3c7; border: 1px solid #fbbf24; border-radius: 8px; padding: 20px;">
        <h3 style="margin: 0; color: #92400e;">{escape(task_title)}</h3>
        <span style="background: #dc2626; color: white; padding: 4px 12px; border-radius: 20px;">{label} overdue</span>
        <p style="color: #92400e;">This task is waiting for your attention!</p>
      </div>
      <p style="text-align: center;"><a href="{escape(base)}/tasks">Complete Task Now</a></p>
      <p><small>This is reminder {days} of {max_reminders}. You can disable reminders anytime in your
      <a href="{escape(base)}/profile">profile settings</a>.</small></p>
    </div>
    <div style="background: #f1f5f9; padding: 20px; text-align: center; font-size: 12px;">
      <p>This reminder was sent because you have task alerts enabled.</p>
      <p><a href="{escape(base)}/profile">Manage Preferences</a> | <a href="mailto:{SUPPORT_EMAIL}">Contact Support</a></p>
    </div>
  </div>
</body>
</html>
"""

    return EmailMessage(
        to_address=to_address,
        subject=reminder_subject(task_title, days),
        text=text,
        html=html,
    )


def compose_welcome(
    *,
    to_address: str,
    recipient_name: str,
    frontend_url: str,
    max_reminders: int = MAX_REMINDERS,
) -> EmailMessage:
    base = frontend_url.rstrip("/")
    name = recipient_name or "there"

    text = (
        "Welcome to Taskio Reminders!\n"
        "\n"
        f"Hi {name}!\n"
        "\n"
        "Thank you for enabling task reminders.\n"
        "\n"
        "How reminders work:\n"
        "- Day 1: First reminder when a task becomes overdue\n"
        "- Day 2: Second reminder if still incomplete\n"
        "- Day 3: Final reminder to help you stay on track\n"
        "\n"
        f"- Maximum {max_reminders} reminders per task\n"
        "- Only sent once per day\n"
        "\n"
        f"View your tasks: {base}/tasks\n"
        f"Manage settings: {base}/profile\n"
        "\n"
        f"Contact: {SUPPORT_EMAIL}\n"
    )

    html = f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Welcome to Taskio Reminders</title></head>
<body style="font-family: 'Segoe UI', Tahoma, sans-serif; color: #333; background: #f8fafc;">
  <div style="max-width: 600px; margin: 0 auto; background: white; border-radius: 12px;">
    <div style="background: #667eea; color: white; padding: 30px; text-align: center;">
      <h1>Task Reminders Activated!</h1>
    </div>
    <div style="padding: 30px;">
      <h2>Hi {escape(name)}!</h2>
      <p>Thank you for enabling task reminders.</p>
      <ul>
        <li><strong>Day 1:</strong> First reminder when a task becomes overdue</li>
        <li><strong>Day 2:</strong> Second reminder if still incomplete</li>
        <li><strong>Day 3:</strong> Final reminder to help you stay on track</li>
      </ul>
      <p>Maximum {max_reminders} reminders per task, only sent once per day.</p>
      <p style="text-align: center;"><a href="{escape(base)}/tasks">View My Tasks</a></p>
      <p><small>Manage your reminder preferences in your <a href="{escape(base)}/profile">profile settings</a>.</small></p>
    </div>
  </div>
</body>
</html>
"""

    return EmailMessage(
        to_address=to_address,
        subject="Task Reminders Activated - Welcome to Taskio Alerts",
        text=text,
        html=html,
    )

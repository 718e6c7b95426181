# src/taskio_reminders/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..reminders.alerts import set_alerts
from ..reminders.driver import seconds_until_next_tick
from ..reminders.policy import days_overdue
from ..reminders.selector import select_eligible

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

# A manual pass sleeps between sends, so give it room.
MANUAL_CHECK_TIMEOUT_SECONDS = 600.0


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /check, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(ts: float | None) -> str:
    if ts is None:
        return "-"
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M")


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    sched = state.scheduler
    now_ts = sched.clock.now()
    next_in = seconds_until_next_tick(now_ts, sched.interval_seconds)
    last = sched.last_report
    last_line = "none yet" if last is None else f"{_fmt_ts(last.started_at)}: {last.summary()}"
    running = "yes" if state.runner is not None else "no"
    policy = sched.policy
    return (
        "Status:\n"
        f"  Scheduler running: {running}\n"
        f"  Notifier: {type(state.notifier).__name__}\n"
        f"  Interval: {sched.interval_seconds:.0f}s (next tick in {next_in:.0f}s)\n"
        f"  Policy: max {policy.max_reminders} reminders, cooldown {policy.cooldown_seconds / 3600:.0f}h, "
        f"window {policy.overdue_min_days}-{policy.overdue_max_days} days overdue\n"
        f"  Passes run: {sched.passes_run}\n"
        f"  Last pass: {last_line}"
    )


def cmd_check(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/check -> run one reminder pass now and report the outcome."""
    if emit:
        with contextlib.suppress(Exception):
            emit("[CHECK] Running reminder pass...")

    try:
        result = state.run_async(
            state.scheduler.trigger_manual(), timeout=MANUAL_CHECK_TIMEOUT_SECONDS
        )
    except TimeoutError:
        # The pass is not cancelled; it keeps going on the scheduler loop.
        logger.warning(
            "Manual reminder check still running after %.0fs", MANUAL_CHECK_TIMEOUT_SECONDS
        )
        return (
            f"[RUNNING] Manual reminder check is still running after "
            f"{MANUAL_CHECK_TIMEOUT_SECONDS:.0f}s; see /status for its result once it finishes."
        )
    except Exception as e:
        logger.exception("Manual reminder check could not be run")
        return f"[FAILED] Manual reminder check could not be run: {e}"

    return f"[{'OK' if result.success else 'FAILED'}] {result.message}"


def cmd_due(state: AppState, args: list[str]) -> str:
    """/due -> list tasks that would get a reminder right now (nothing is sent)."""
    sched = state.scheduler
    now_ts = sched.clock.now()
    try:
        eligible = select_eligible(state.store, now_ts=now_ts, policy=sched.policy)
    except Exception as e:
        logger.exception("Failed to list eligible reminders")
        return f"Failed to read tasks: {e}"

    if not eligible:
        return "No overdue tasks require reminders right now."

    lines = [f"{len(eligible)} task(s) eligible for a reminder:"]
    for i, c in enumerate(eligible, start=1):
        days = days_overdue(c.due_at, now_ts) if c.due_at is not None else 0
        lines.append(
            f"{i}. #{c.task_id} {c.title!r} -> {c.user_email} "
            f"(due {_fmt_ts(c.due_at)}, {days}d overdue, sent {c.reminder_count}x)"
        )
    return "\n".join(lines)


def cmd_alerts(state: AppState, args: list[str]) -> str:
    """
    /alerts <user_id>          -> show the user's alert setting
    /alerts <user_id> on|off   -> enable/disable overdue reminders
    """
    if not args:
        return "Usage: /alerts <user_id> [on|off]"

    user_id = args[0]
    if len(args) == 1:
        user = state.store.get_user(user_id)
        if user is None:
            return f"Unknown user: {user_id}"
        return (
            f"Alerts for {user.email}: {'ON' if user.alerts_enabled else 'OFF'} "
            f"(activated {_fmt_ts(user.alerts_activated_at)})"
        )

    arg = args[1].lower()
    if arg in ("on", "1", "true", "yes"):
        enabled = True
    elif arg in ("off", "0", "false", "no"):
        enabled = False
    else:
        return "Usage: /alerts <user_id> on|off"

    try:
        result = state.run_async(set_alerts(state.store, state.notifier, user_id, enabled))
    except LookupError:
        return f"Unknown user: {user_id}"

    if result.first_time:
        note = " Welcome email sent." if result.welcome_sent else " Welcome email could not be sent."
        return result.message + "." + note
    return result.message + "."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show scheduler status and last pass.")
registry.register("check", cmd_check, help_text="Run a reminder pass now.", aliases=["run"])
registry.register("due", cmd_due, help_text="List tasks eligible for a reminder (dry run).")
registry.register("alerts", cmd_alerts, help_text="Reminder opt-in: /alerts <user_id> on | off.")

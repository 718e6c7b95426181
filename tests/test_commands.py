# tests/test_commands.py

from __future__ import annotations

from taskio_reminders.cli.commands import CommandRegistry, registry

from .fakes import DAY, HOUR, NOW


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a", aliases=["aa"])
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x y") == "h2:x,y"
    assert reg.handle(state, "/AA") == "h2:"
    assert reg.handle(state, "/b", emit=notes.append) == "h3"
    assert called == {"h2": 2, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_help_lists_registered_commands(state) -> None:
    out = registry.handle(state, "/help") or ""
    for name in ("/check", "/due", "/alerts", "/status"):
        assert name in out


def test_due_is_a_dry_run(state) -> None:
    uid = state.store.add_user(email="ann@example.com", alerts_enabled=True)
    task_id = state.store.add_task(user_id=uid, title="Pay rent", due_at=NOW - 2 * DAY)
    state.store.add_task(user_id=uid, title="Later", due_at=NOW + DAY)

    out = registry.handle(state, "/due") or ""

    assert "1 task(s) eligible" in out
    assert "'Pay rent'" in out
    assert "2d overdue" in out
    assert state.notifier.attempts == []
    assert state.store.get_task(task_id).reminder_count == 0


def test_due_with_nothing_eligible(state) -> None:
    assert registry.handle(state, "/due") == "No overdue tasks require reminders right now."


def test_check_runs_a_pass_and_reports(state) -> None:
    uid = state.store.add_user(email="ann@example.com", alerts_enabled=True)
    task_id = state.store.add_task(user_id=uid, title="Pay rent", due_at=NOW - 5 * HOUR)
    notes: list[str] = []

    out = registry.handle(state, "/check", emit=notes.append) or ""

    assert out.startswith("[OK]")
    assert "1 sent" in out
    assert notes and "Running" in notes[0]
    assert state.store.get_task(task_id).reminder_count == 1
    assert state.scheduler.passes_run == 1

    # cooldown: a second manual check sends nothing
    out2 = registry.handle(state, "/run") or ""
    assert "0 sent" in out2
    assert len(state.notifier.sent) == 1


def test_alerts_toggle_sends_welcome_once(state) -> None:
    uid = state.store.add_user(email="bob@example.com", name="Bob")

    out = registry.handle(state, f"/alerts {uid} on") or ""
    assert "Task alerts enabled successfully" in out
    assert "Welcome email sent" in out
    assert state.notifier.welcomed == ["bob@example.com"]

    assert "ON" in (registry.handle(state, f"/alerts {uid}") or "")

    out = registry.handle(state, f"/alerts {uid} on") or ""
    assert "Welcome" not in out
    assert state.notifier.welcomed == ["bob@example.com"]

    out = registry.handle(state, f"/alerts {uid} off") or ""
    assert "Task alerts disabled successfully" in out
    assert state.store.get_user(uid).alerts_enabled is False


def test_alerts_usage_and_unknown_user(state) -> None:
    assert (registry.handle(state, "/alerts") or "").startswith("Usage")
    assert (registry.handle(state, "/alerts nobody maybe") or "").startswith("Usage")
    assert registry.handle(state, "/alerts nobody") == "Unknown user: nobody"
    assert registry.handle(state, "/alerts nobody on") == "Unknown user: nobody"


def test_status_shows_policy_and_last_pass(state) -> None:
    out = registry.handle(state, "/status") or ""
    assert "Scheduler running: no" in out
    assert "max 3 reminders" in out
    assert "cooldown 24h" in out
    assert "next tick in 3600s" in out
    assert "none yet" in out

    registry.handle(state, "/check")
    assert "none yet" not in (registry.handle(state, "/status") or "")


def test_check_reports_still_running_when_the_wait_times_out(state, monkeypatch) -> None:
    def run_async(coro, timeout=None):
        coro.close()
        raise TimeoutError()

    monkeypatch.setattr(state, "run_async", run_async)

    out = registry.handle(state, "/check") or ""

    assert out.startswith("[RUNNING]")
    assert "still running" in out
    assert "could not be run" not in out

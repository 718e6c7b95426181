# src/taskio_reminders/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then:
- starts the reminder scheduler in a background thread,
- runs the operator console in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..reminders.driver import start_scheduler_in_background

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    # Close the notifier's HTTP client first: with a runner this goes through the
    # scheduler loop, without one run_async falls back to asyncio.run.
    close = getattr(state.notifier, "aclose", None)
    if callable(close):
        try:
            state.run_async(close(), timeout=5.0)
        except Exception:
            logger.debug("Notifier close failed.", exc_info=True)

    runner = getattr(state, "runner", None)
    if runner is not None:
        runner.stop()
        runner.join(timeout=10.0)
        state.runner = None

    # ReminderStore uses short-lived sqlite connections per call; no explicit close required.
    try:
        state.store.close()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskio")
    log_file = setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s (log file: %s)...", getattr(settings, "app_name", "taskio-reminders"), log_file)

    state = create_initial_state(settings=settings)
    state.runner = start_scheduler_in_background(state.scheduler)
    if state.runner is None:
        logger.error("Reminder scheduler failed to start.")

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        # Not in the main thread, or the platform lacks SIGTERM.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running scheduler only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()

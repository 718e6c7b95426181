# src/taskio_reminders/core/clock.py

from __future__ import annotations

import time


class SystemClock:
    """Wall clock (UTC epoch seconds)."""

    def now(self) -> float:
        return time.time()

# src/taskio_reminders/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole service.
- No secrets required at import time (without an API key the service logs instead of mailing).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "TASKIO"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Email / SendGrid ----
    sendgrid_api_key: Optional[str]
    sendgrid_base_url: str
    from_email: str
    from_name: str
    frontend_url: str

    # ---- Local data paths ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Scheduler timing ----
    check_interval_seconds: float
    startup_delay_seconds: float
    dispatch_delay_seconds: float
    send_timeout_seconds: float

    # ---- Reminder policy ----
    max_reminders: int
    cooldown_hours: float
    overdue_min_days: int
    overdue_max_days: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskio-reminders")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        sendgrid_api_key = _first_env(_k("SENDGRID_API_KEY"), "SENDGRID_API_KEY", default=None)
        sendgrid_base_url = _env(_k("SENDGRID_BASE_URL"), "https://api.sendgrid.com")
        from_email = _env(_k("FROM_EMAIL"), "verifytaskio@gmail.com")
        from_name = _env(_k("FROM_NAME"), "Taskio Reminders")
        frontend_url = (
            _first_env(_k("FRONTEND_URL"), "FRONTEND_URL", default="http://localhost:5173") or ""
        ).rstrip("/")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskio"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        check_interval_seconds = _env_float(_k("CHECK_INTERVAL_SECONDS"), 3600.0)
        startup_delay_seconds = _env_float(_k("STARTUP_DELAY_SECONDS"), 30.0)
        dispatch_delay_seconds = _env_float(_k("DISPATCH_DELAY_SECONDS"), 1.0)
        send_timeout_seconds = _env_float(_k("SEND_TIMEOUT_SECONDS"), 30.0)

        max_reminders = _env_int(_k("MAX_REMINDERS"), 3)
        cooldown_hours = _env_float(_k("COOLDOWN_HOURS"), 24.0)
        overdue_min_days = _env_int(_k("OVERDUE_MIN_DAYS"), 1)
        overdue_max_days = _env_int(_k("OVERDUE_MAX_DAYS"), 3)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            sendgrid_api_key=sendgrid_api_key,
            sendgrid_base_url=sendgrid_base_url,
            from_email=from_email,
            from_name=from_name,
            frontend_url=frontend_url,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            check_interval_seconds=check_interval_seconds,
            startup_delay_seconds=startup_delay_seconds,
            dispatch_delay_seconds=dispatch_delay_seconds,
            send_timeout_seconds=send_timeout_seconds,
            max_reminders=max_reminders,
            cooldown_hours=cooldown_hours,
            overdue_min_days=overdue_min_days,
            overdue_max_days=overdue_max_days,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS

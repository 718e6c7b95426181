# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKIO_APP_NAME": "App display name (default: taskio-reminders).",
    "TASKIO_LOG_LEVEL": "Console logging level (default: INFO).",
    # Switches
    "TASKIO_CONSOLE_ENABLED": "Enable the interactive console (true/false, default: true).",
    # Email / SendGrid
    "TASKIO_SENDGRID_API_KEY": (
        "SendGrid API key (SENDGRID_API_KEY also accepted). Unset => reminders are only logged."
    ),
    "TASKIO_SENDGRID_BASE_URL": "SendGrid API base URL (default: https://api.sendgrid.com).",
    "TASKIO_FROM_EMAIL": "Sender address (default: verifytaskio@gmail.com).",
    "TASKIO_FROM_NAME": "Sender display name (default: Taskio Reminders).",
    "TASKIO_FRONTEND_URL": (
        "Web app base URL used for links in emails (FRONTEND_URL also accepted, "
        "default: http://localhost:5173)."
    ),
    # Paths (gitignored)
    "TASKIO_DATA_DIR": "Local data directory (default: .local/taskio).",
    "TASKIO_TASKS_DB_PATH": "Task store SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Scheduler timing
    "TASKIO_CHECK_INTERVAL_SECONDS": "Timer interval, aligned to the epoch (default: 3600 = top of the hour).",
    "TASKIO_STARTUP_DELAY_SECONDS": "Delay before the one-off startup pass (default: 30).",
    "TASKIO_DISPATCH_DELAY_SECONDS": "Pause between two sends in a pass (default: 1).",
    "TASKIO_SEND_TIMEOUT_SECONDS": "Per-send timeout; a timeout counts as a failed send (default: 30).",
    # Reminder policy
    "TASKIO_MAX_REMINDERS": "Reminders per task at most (default: 3).",
    "TASKIO_COOLDOWN_HOURS": "Minimum gap between two reminders for a task (default: 24).",
    "TASKIO_OVERDUE_MIN_DAYS": "First overdue day that gets a reminder (default: 1).",
    "TASKIO_OVERDUE_MAX_DAYS": "Last overdue day that gets a reminder (default: 3).",
}

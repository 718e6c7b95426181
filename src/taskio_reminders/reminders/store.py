# src/taskio_reminders/reminders/store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
import uuid
from pathlib import Path

from .models import ReminderCandidate, Task, TaskStatus, User

logger = logging.getLogger(__name__)


class ReminderStore:
    """
    SQLite task + user store.

    The rest of the application owns these rows (CRUD); the scheduler only reads
    them and writes the two bookkeeping columns (reminder_count, last_reminder_sent),
    one task at a time.

    The schema is migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except Exception:
            total = -1
        logger.info("ReminderStore ready db=%s tasks=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL,
                    name TEXT NOT NULL DEFAULT '',
                    alerts_enabled INTEGER NOT NULL DEFAULT 0,
                    alerts_activated_at REAL,
                    created_at REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    title TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'todo',
                    due_at REAL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL,
                    reminder_count INTEGER NOT NULL DEFAULT 0,
                    last_reminder_sent REAL
                )
                """
            )

            def add_cols(table: str, wanted: dict[str, str]) -> None:
                cur.execute(f"PRAGMA table_info({table})")
                cols = {row["name"] for row in cur.fetchall()}
                for name, decl in wanted.items():
                    if name in cols:
                        continue
                    cur.execute(f"ALTER TABLE {table} ADD COLUMN {name} {decl}")
                    logger.info("ReminderStore migration: added column %s.%s", table, name)

            # Older databases predate reminders entirely.
            add_cols(
                "users",
                {
                    "alerts_enabled": "INTEGER NOT NULL DEFAULT 0",
                    "alerts_activated_at": "REAL",
                },
            )
            add_cols(
                "tasks",
                {
                    "reminder_count": "INTEGER NOT NULL DEFAULT 0",
                    "last_reminder_sent": "REAL",
                },
            )

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status_due ON tasks(status, due_at)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=str(row["id"]),
            email=str(row["email"] or ""),
            name=str(row["name"] or ""),
            alerts_enabled=bool(row["alerts_enabled"]),
            alerts_activated_at=(
                float(row["alerts_activated_at"]) if row["alerts_activated_at"] is not None else None
            ),
            created_at=float(row["created_at"] or 0.0),
        )

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            user_id=str(row["user_id"]),
            title=str(row["title"] or ""),
            status=TaskStatus.from_db(row["status"]),
            due_at=float(row["due_at"]) if row["due_at"] is not None else None,
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
            reminder_count=int(row["reminder_count"] or 0),
            last_reminder_sent=(
                float(row["last_reminder_sent"]) if row["last_reminder_sent"] is not None else None
            ),
        )

    @staticmethod
    def _row_to_candidate(row: sqlite3.Row) -> ReminderCandidate:
        return ReminderCandidate(
            task_id=int(row["id"]),
            title=str(row["title"] or ""),
            due_at=float(row["due_at"]) if row["due_at"] is not None else None,
            status=TaskStatus.from_db(row["status"]),
            user_email=str(row["user_email"] or ""),
            user_name=str(row["user_name"] or ""),
            alerts_enabled=bool(row["alerts_enabled"]),
            reminder_count=int(row["reminder_count"] or 0),
            last_reminder_sent=(
                float(row["last_reminder_sent"]) if row["last_reminder_sent"] is not None else None
            ),
        )

    # ---- users ----

    def add_user(
        self,
        *,
        email: str,
        name: str = "",
        user_id: str | None = None,
        alerts_enabled: bool = False,
    ) -> str:
        if not email or not email.strip():
            raise ValueError("email is required")

        uid = user_id or uuid.uuid4().hex
        now = time.time()
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO users(id, email, name, alerts_enabled, alerts_activated_at, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    uid,
                    email.strip(),
                    (name or "").strip(),
                    1 if alerts_enabled else 0,
                    now if alerts_enabled else None,
                    now,
                ),
            )
            conn.commit()
            logger.debug("User added id=%s alerts=%s", uid, alerts_enabled)
            return uid
        finally:
            conn.close()

    def get_user(self, user_id: str) -> User | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
            return self._row_to_user(row) if row else None
        finally:
            conn.close()

    def set_alerts_enabled(
        self,
        user_id: str,
        enabled: bool,
        *,
        now_ts: float | None = None,
    ) -> tuple[User, bool]:
        """
        Update the reminder opt-in flag.

        Returns (user, first_time): first_time is True only when alerts go from
        off to on. alerts_activated_at is stamped once and never cleared.
        """
        if now_ts is None:
            now_ts = time.time()

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT alerts_enabled FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
            if row is None:
                raise LookupError(f"user not found: {user_id}")
            first_time = bool(enabled) and not bool(row["alerts_enabled"])

            cur.execute(
                """
                UPDATE users
                SET alerts_enabled = ?,
                    alerts_activated_at = CASE
                        WHEN ? = 1 AND alerts_activated_at IS NULL THEN ?
                        ELSE alerts_activated_at
                    END
                WHERE id = ?
                """,
                (1 if enabled else 0, 1 if enabled else 0, float(now_ts), user_id),
            )
            conn.commit()

            cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            return self._row_to_user(cur.fetchone()), first_time
        finally:
            conn.close()

    # ---- tasks ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def add_task(
        self,
        *,
        user_id: str,
        title: str,
        due_at: float | None = None,
        status: TaskStatus = TaskStatus.TODO,
    ) -> int:
        if not title or not title.strip():
            raise ValueError("title is required")

        now = time.time()
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO tasks(
                    user_id, title, status, due_at, created_at, updated_at,
                    reminder_count, last_reminder_sent
                )
                VALUES (?, ?, ?, ?, ?, ?, 0, NULL)
                """,
                (user_id, title.strip(), status.value, due_at, now, now),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)
            logger.debug("Task added id=%s user=%s status=%s due_at=%s", task_id, user_id, status.value, due_at)
            return task_id
        finally:
            conn.close()

    def get_task(self, task_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),))
            row = cur.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def update_task_status(self, task_id: int, new_status: TaskStatus) -> None:
        now = time.time()
        conn = self._get_conn()
        try:
            conn.execute(
                "UPDATE tasks SET status = ?, updated_at = ? WHERE id = ?",
                (new_status.value, now, int(task_id)),
            )
            conn.commit()
        finally:
            conn.close()

    # ---- scheduler API ----

    def list_overdue_candidates(self, *, now_ts: float) -> list[ReminderCandidate]:
        """
        Non-done tasks with a due date strictly before now_ts, joined to their owner.

        Rows for users with alerts off are included (alerts_enabled=False) so the
        selector sees the whole picture; ordered oldest due date first.
        """
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT
                    t.id,
                    t.title,
                    t.status,
                    t.due_at,
                    COALESCE(t.reminder_count, 0) AS reminder_count,
                    t.last_reminder_sent,
                    u.email AS user_email,
                    u.name AS user_name,
                    u.alerts_enabled
                FROM tasks t
                JOIN users u ON t.user_id = u.id
                WHERE t.status != 'done'
                  AND t.due_at IS NOT NULL
                  AND t.due_at < ?
                ORDER BY t.due_at ASC, t.id ASC
                """,
                (float(now_ts),),
            )
            return [self._row_to_candidate(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def record_reminder_sent(self, task_id: int, *, sent_at: float) -> None:
        """Atomic per row: reminder_count += 1, last_reminder_sent = sent_at."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE tasks
                SET reminder_count = COALESCE(reminder_count, 0) + 1,
                    last_reminder_sent = ?
                WHERE id = ?
                """,
                (float(sent_at), int(task_id)),
            )
            conn.commit()
            if cur.rowcount != 1:
                logger.warning("record_reminder_sent: task %s not found", task_id)
        finally:
            conn.close()

"""Database schema and management for Fristwatch."""

import logging
import sqlite3
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Fixed-width UTC format keeps lexicographic order equal to time order
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def to_db_timestamp(value: datetime) -> str:
    """Serialize an aware datetime as a fixed-width UTC string."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def from_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.strptime(value, _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def to_db_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def from_db_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


class DatabaseManager:
    """Manages the Fristwatch SQLite schema and connections."""

    def __init__(self, db_path: str):
        self.db_path = Path(db_path)

    def get_connection(self) -> sqlite3.Connection:
        """Get database connection with proper settings."""
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA foreign_keys=ON;")
        conn.row_factory = sqlite3.Row
        return conn

    def ensure_schema(self) -> None:
        """Ensure all tables exist."""
        with self.get_connection() as conn:
            conn.executescript(
                """
            -- Users owning deadlines (maintained by the case-management app)
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT,
                role TEXT NOT NULL DEFAULT 'staff',  -- 'admin', 'lawyer', 'staff'
                active INTEGER NOT NULL DEFAULT 1,
                away INTEGER NOT NULL DEFAULT 0,
                away_from TEXT,
                away_until TEXT,
                substitute_id TEXT,
                FOREIGN KEY (substitute_id) REFERENCES users(id)
            );

            -- Tracked deadlines
            CREATE TABLE IF NOT EXISTS deadlines (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                due_date TEXT NOT NULL,
                hard_due_date TEXT,
                case_id TEXT,
                jurisdiction TEXT,
                reminder_dates TEXT NOT NULL DEFAULT '[]',  -- JSON array of ISO dates
                halfway_date TEXT,
                resolved INTEGER NOT NULL DEFAULT 0,
                responsible_id TEXT,
                FOREIGN KEY (responsible_id) REFERENCES users(id)
            );

            -- Append-only notification ledger
            CREATE TABLE IF NOT EXISTS notifications (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                recipient_id TEXT NOT NULL,
                category TEXT NOT NULL,
                title TEXT NOT NULL,
                message TEXT NOT NULL,
                payload TEXT NOT NULL DEFAULT '{}',
                created_at TEXT NOT NULL
            );

            -- Runtime-tunable settings (JSON values)
            CREATE TABLE IF NOT EXISTS app_settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            -- Sweep run tracking
            CREATE TABLE IF NOT EXISTS sweep_runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                started_at TEXT NOT NULL,
                finished_at TEXT NOT NULL,
                expired_substitutions INTEGER DEFAULT 0,
                reminders_sent INTEGER DEFAULT 0,
                escalations_sent INTEGER DEFAULT 0,
                failures INTEGER DEFAULT 0
            );

            CREATE INDEX IF NOT EXISTS idx_deadlines_resolved ON deadlines(resolved);
            CREATE INDEX IF NOT EXISTS idx_notifications_category_time
                ON notifications(category, created_at);
            CREATE INDEX IF NOT EXISTS idx_notifications_recipient
                ON notifications(recipient_id);
            CREATE INDEX IF NOT EXISTS idx_sweep_runs_started ON sweep_runs(started_at);
            """
            )

            logger.info("Database schema ensured")

    def record_sweep_run(
        self,
        started_at: datetime,
        finished_at: datetime,
        expired_substitutions: int = 0,
        reminders_sent: int = 0,
        escalations_sent: int = 0,
        failures: int = 0,
    ) -> None:
        """Record a sweep run for tracking."""
        with self.get_connection() as conn:
            conn.execute(
                """
                INSERT INTO sweep_runs
                (started_at, finished_at, expired_substitutions, reminders_sent,
                 escalations_sent, failures)
                VALUES (?, ?, ?, ?, ?, ?)
            """,
                (
                    to_db_timestamp(started_at),
                    to_db_timestamp(finished_at),
                    expired_substitutions,
                    reminders_sent,
                    escalations_sent,
                    failures,
                ),
            )

    def get_last_sweep_run(self) -> Optional[Dict[str, Any]]:
        """Get the most recent sweep run."""
        with self.get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM sweep_runs ORDER BY started_at DESC, id DESC LIMIT 1"
            )
            result = cursor.fetchone()
            if not result:
                return None

            run = dict(result)
            run["started_at"] = from_db_timestamp(run["started_at"])
            run["finished_at"] = from_db_timestamp(run["finished_at"])
            return run

"""Read access to deadlines and users, plus the substitution maintenance writes."""

import json
import logging
import sqlite3
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .database import (
    DatabaseManager,
    from_db_date,
    from_db_timestamp,
    to_db_date,
    to_db_timestamp,
)
from .models import DeadlineEntry, ResponsibleUser, UserRole

logger = logging.getLogger(__name__)

_UNSET = object()


class SubstitutionError(ValueError):
    """Raised when a substitute assignment is invalid."""


class DeadlineRepository:
    """Deadline and user access for the reminder engine."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def add_user(self, user: ResponsibleUser) -> ResponsibleUser:
        """Insert or replace a user record."""
        with self.db.get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO users
                (id, name, email, role, active, away, away_from, away_until, substitute_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    user.id,
                    user.name,
                    user.email,
                    user.role.value,
                    1 if user.active else 0,
                    1 if user.away else 0,
                    to_db_timestamp(user.away_from) if user.away_from else None,
                    to_db_timestamp(user.away_until) if user.away_until else None,
                    user.substitute_id,
                ),
            )
        return user

    def get_user(self, user_id: str) -> Optional[ResponsibleUser]:
        """Load a user with their substitute attached."""
        users = self._load_users([user_id], with_substitutes=True)
        return users.get(user_id)

    def list_active_admins(self) -> List[ResponsibleUser]:
        with self.db.get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM users WHERE LOWER(role) = ? AND active = 1 ORDER BY id",
                (UserRole.ADMIN.value,),
            ).fetchall()
        return [user for user in map(self._safe_row_to_user, rows) if user]

    def expire_substitutions(self, now: datetime) -> int:
        """Clear the away flag for users whose away period has ended.

        Returns the number of users updated. Re-running is a no-op.
        """
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                """
                UPDATE users SET away = 0
                WHERE away = 1 AND away_until IS NOT NULL AND away_until < ?
            """,
                (to_db_timestamp(now),),
            )
            count = cursor.rowcount

        if count > 0:
            logger.info(f"Auto-deactivated {count} expired substitution(s)")
        return count

    def assign_substitute(
        self,
        user_id: str,
        now: datetime,
        substitute_id=_UNSET,
        away_from=_UNSET,
        away_until=_UNSET,
        activate: Optional[bool] = None,
    ) -> ResponsibleUser:
        """Set or update a user's substitute and away period.

        Only the arguments that are passed are changed. Passing ``None`` for
        ``substitute_id``, ``away_from`` or ``away_until`` clears that field.
        """
        user = self.get_user(user_id)
        if user is None:
            raise SubstitutionError(f"Unknown user: {user_id}")

        if substitute_id is not _UNSET and substitute_id is not None:
            if substitute_id == user_id:
                raise SubstitutionError("A user cannot substitute for themselves")
            substitute = self.get_user(substitute_id)
            if substitute is None or not substitute.active:
                raise SubstitutionError(
                    f"Substitute not found or inactive: {substitute_id}"
                )

        if activate is True:
            until = user.away_until if away_until is _UNSET else away_until
            if until is not None and until < now:
                raise SubstitutionError("Away period lies in the past")
            effective = (
                user.substitute_id if substitute_id is _UNSET else substitute_id
            )
            if not effective:
                raise SubstitutionError("No substitute assigned")

        updates: Dict[str, object] = {}
        if substitute_id is not _UNSET:
            updates["substitute_id"] = substitute_id
        if away_from is not _UNSET:
            updates["away_from"] = to_db_timestamp(away_from) if away_from else None
        if away_until is not _UNSET:
            updates["away_until"] = (
                to_db_timestamp(away_until) if away_until else None
            )
        if activate is not None:
            updates["away"] = 1 if activate else 0

        if updates:
            assignments = ", ".join(f"{column} = ?" for column in updates)
            with self.db.get_connection() as conn:
                conn.execute(
                    f"UPDATE users SET {assignments} WHERE id = ?",
                    (*updates.values(), user_id),
                )
            logger.info(f"Updated substitution for {user_id}: {sorted(updates)}")

        updated = self.get_user(user_id)
        if updated is None:
            raise SubstitutionError(f"User disappeared during update: {user_id}")
        return updated

    # ------------------------------------------------------------------
    # Deadlines
    # ------------------------------------------------------------------

    def add_deadline(self, entry: DeadlineEntry) -> DeadlineEntry:
        """Insert or replace a deadline entry."""
        with self.db.get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO deadlines
                (id, title, due_date, hard_due_date, case_id, jurisdiction,
                 reminder_dates, halfway_date, resolved, responsible_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    entry.id,
                    entry.title,
                    to_db_date(entry.due_date),
                    to_db_date(entry.hard_due_date),
                    entry.case_id,
                    entry.jurisdiction,
                    json.dumps([d.isoformat() for d in entry.reminder_dates]),
                    to_db_date(entry.halfway_date),
                    1 if entry.resolved else 0,
                    entry.responsible_id,
                ),
            )
        return entry

    def list_open_deadlines(self) -> List[DeadlineEntry]:
        """All unresolved deadlines with responsible user and substitute loaded."""
        entries, _ = self.load_open_deadlines()
        return entries

    def load_open_deadlines(self) -> Tuple[List[DeadlineEntry], int]:
        """Open deadlines plus the number of rows dropped as unreadable.

        A row that cannot be mapped (bad date, bad JSON) is logged and
        dropped. A responsible user whose row cannot be mapped is left
        unset on the deadline.
        """
        with self.db.get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM deadlines WHERE resolved = 0 ORDER BY due_date, id"
            ).fetchall()

        entries = []
        for row in rows:
            try:
                entries.append(self._row_to_deadline(row))
            except (TypeError, ValueError) as e:
                logger.error(f"Skipping unreadable deadline {row['id']}: {e}")
        dropped = len(rows) - len(entries)

        users = self._load_users(
            {e.responsible_id for e in entries if e.responsible_id},
            with_substitutes=True,
        )
        for entry in entries:
            if entry.responsible_id:
                entry.responsible = users.get(entry.responsible_id)
        return entries, dropped

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    def _load_users(
        self, user_ids: Iterable[str], with_substitutes: bool = False
    ) -> Dict[str, ResponsibleUser]:
        ids = list(user_ids)
        if not ids:
            return {}

        placeholders = ", ".join("?" for _ in ids)
        with self.db.get_connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM users WHERE id IN ({placeholders})", ids
            ).fetchall()
        users = {}
        for row in rows:
            user = self._safe_row_to_user(row)
            if user is not None:
                users[user.id] = user

        if with_substitutes:
            substitute_ids = {
                u.substitute_id for u in users.values() if u.substitute_id
            }
            # Single hop: a substitute's own substitute is not loaded
            substitutes = self._load_users(substitute_ids)
            for user in users.values():
                if user.substitute_id:
                    user.substitute = substitutes.get(user.substitute_id)
        return users

    @classmethod
    def _safe_row_to_user(cls, row: sqlite3.Row) -> Optional[ResponsibleUser]:
        try:
            return cls._row_to_user(row)
        except ValueError as e:
            logger.error(f"Skipping unreadable user {row['id']}: {e}")
            return None

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> ResponsibleUser:
        return ResponsibleUser(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            role=UserRole((row["role"] or "").lower()),
            active=bool(row["active"]),
            away=bool(row["away"]),
            away_from=from_db_timestamp(row["away_from"]),
            away_until=from_db_timestamp(row["away_until"]),
            substitute_id=row["substitute_id"],
        )

    @staticmethod
    def _row_to_deadline(row: sqlite3.Row) -> DeadlineEntry:
        return DeadlineEntry(
            id=row["id"],
            title=row["title"],
            due_date=from_db_date(row["due_date"]),
            hard_due_date=from_db_date(row["hard_due_date"]),
            case_id=row["case_id"],
            jurisdiction=row["jurisdiction"],
            reminder_dates=[
                from_db_date(d) for d in json.loads(row["reminder_dates"] or "[]")
            ],
            halfway_date=from_db_date(row["halfway_date"]),
            resolved=bool(row["resolved"]),
            responsible_id=row["responsible_id"],
        )

"""In-app notification store backed by the ``notifications`` table."""

import json
import logging
from dataclasses import replace
from typing import List

from .clock import Clock
from .database import DatabaseManager, from_db_timestamp, to_db_timestamp
from .models import NotificationCategory, NotificationFilter, NotificationRecord

logger = logging.getLogger(__name__)


class NotificationStore:
    """Append-only store of emitted notifications.

    Records are never updated; the table doubles as the deduplication ledger.
    """

    def __init__(self, db: DatabaseManager, clock: Clock):
        self.db = db
        self.clock = clock

    def create(self, record: NotificationRecord) -> NotificationRecord:
        """Persist a notification and return it with id and timestamp set."""
        created_at = record.created_at or self.clock.now()

        with self.db.get_connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO notifications
                (recipient_id, category, title, message, payload, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """,
                (
                    record.recipient_id,
                    record.category.value,
                    record.title,
                    record.message,
                    json.dumps(record.payload, sort_keys=True),
                    to_db_timestamp(created_at),
                ),
            )
            record_id = cursor.lastrowid

        logger.debug(
            f"Stored {record.category.value} notification {record_id} "
            f"for {record.recipient_id}"
        )
        return replace(record, id=record_id, created_at=created_at)

    def query(self, flt: NotificationFilter) -> List[NotificationRecord]:
        """Return notifications matching ``flt``, oldest first."""
        query = "SELECT * FROM notifications WHERE 1=1"
        params: list = []

        if flt.category is not None:
            query += " AND category = ?"
            params.append(flt.category.value)
        if flt.recipient_id is not None:
            query += " AND recipient_id = ?"
            params.append(flt.recipient_id)
        if flt.created_from is not None:
            query += " AND created_at >= ?"
            params.append(to_db_timestamp(flt.created_from))
        if flt.created_to is not None:
            query += " AND created_at < ?"
            params.append(to_db_timestamp(flt.created_to))

        query += " ORDER BY created_at, id"

        with self.db.get_connection() as conn:
            rows = conn.execute(query, params).fetchall()

        records = [self._row_to_record(row) for row in rows]
        if flt.payload:
            records = [r for r in records if flt.matches_payload(r.payload)]
        return records

    @staticmethod
    def _row_to_record(row) -> NotificationRecord:
        return NotificationRecord(
            id=row["id"],
            recipient_id=row["recipient_id"],
            category=NotificationCategory(row["category"]),
            title=row["title"],
            message=row["message"],
            payload=json.loads(row["payload"] or "{}"),
            created_at=from_db_timestamp(row["created_at"]),
        )

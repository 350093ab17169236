"""Deduplication gate over the notification ledger.

"Already sent" is derived from the append-only ledger rather than stored as
a status flag. The check is read-then-write, so exactly-once holds only while
a single sweep runs at a time.
"""

import logging
from datetime import date
from typing import Optional

from .clock import Clock
from .models import NotificationCategory, NotificationFilter
from .notification_store import NotificationStore

logger = logging.getLogger(__name__)


class DeduplicationGate:
    """Answers whether a deadline notification already went out."""

    def __init__(self, store: NotificationStore, clock: Clock):
        self.store = store
        self.clock = clock

    def already_sent(
        self,
        deadline_id: str,
        category: NotificationCategory,
        offset_days: Optional[int] = None,
    ) -> bool:
        """True if a matching record exists within the current local day.

        Advance reminders match on ``offset_days`` as well; overdue
        escalations match on the deadline alone.
        """
        start, end = self.clock.day_bounds()
        return self._exists(deadline_id, category, offset_days, start, end)

    def sent_since(
        self,
        deadline_id: str,
        category: NotificationCategory,
        since: date,
        offset_days: Optional[int] = None,
    ) -> bool:
        """True if a matching record exists from local ``since`` onwards."""
        start = self.clock.start_of_day(since)
        return self._exists(deadline_id, category, offset_days, start, None)

    def _exists(self, deadline_id, category, offset_days, start, end) -> bool:
        payload = {"deadline_id": deadline_id}
        if category is NotificationCategory.ADVANCE_REMINDER and offset_days is not None:
            payload["offset_days"] = offset_days

        records = self.store.query(
            NotificationFilter(
                category=category,
                payload=payload,
                created_from=start,
                created_to=end,
            )
        )
        if records:
            logger.debug(
                f"Dedup hit for {deadline_id} {category.value} offset={offset_days}"
            )
        return bool(records)

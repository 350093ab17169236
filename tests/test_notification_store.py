"""Tests for the in-app notification store."""

from datetime import timedelta

from fristwatch.clock import FixedClock
from fristwatch.models import NotificationCategory, NotificationFilter, NotificationRecord
from fristwatch.notification_store import NotificationStore


def record(recipient: str = "u-anna", **payload) -> NotificationRecord:
    return NotificationRecord(
        recipient_id=recipient,
        category=NotificationCategory.ADVANCE_REMINDER,
        title="Advance reminder: Appeal",
        message="Deadline expires on 26.10.2026 (7 days left).",
        payload={"deadline_id": "d-1", "offset_days": 7, **payload},
    )


class TestNotificationStore:
    """Append-only ledger behavior."""

    def test_create_assigns_id_and_timestamp(
        self, store: NotificationStore, clock: FixedClock
    ) -> None:
        stored = store.create(record())

        assert stored.id is not None
        assert stored.created_at == clock.now()

    def test_create_keeps_explicit_timestamp(
        self, store: NotificationStore, clock: FixedClock
    ) -> None:
        earlier = clock.now() - timedelta(days=3)
        stored = store.create(
            NotificationRecord(
                recipient_id="u-anna",
                category=NotificationCategory.OVERDUE,
                title="OVERDUE: Appeal",
                message="...",
                created_at=earlier,
            )
        )

        assert stored.created_at == earlier

    def test_query_round_trips_payload(self, store: NotificationStore) -> None:
        store.create(record(catch_up=True))

        (loaded,) = store.query(NotificationFilter())
        assert loaded.payload == {"deadline_id": "d-1", "offset_days": 7, "catch_up": True}
        assert loaded.category is NotificationCategory.ADVANCE_REMINDER
        assert loaded.is_catch_up
        assert loaded.deadline_id == "d-1"

    def test_query_filters(self, store: NotificationStore) -> None:
        store.create(record("u-anna"))
        store.create(record("u-ben", offset_days=3))
        store.create(
            NotificationRecord(
                recipient_id="u-anna",
                category=NotificationCategory.OVERDUE,
                title="OVERDUE: Appeal",
                message="...",
                payload={"deadline_id": "d-1"},
            )
        )

        by_category = store.query(
            NotificationFilter(category=NotificationCategory.OVERDUE)
        )
        assert [r.recipient_id for r in by_category] == ["u-anna"]

        by_recipient = store.query(NotificationFilter(recipient_id="u-ben"))
        assert len(by_recipient) == 1

        by_payload = store.query(
            NotificationFilter(
                category=NotificationCategory.ADVANCE_REMINDER,
                payload={"deadline_id": "d-1", "offset_days": 7},
            )
        )
        assert [r.recipient_id for r in by_payload] == ["u-anna"]

    def test_query_time_range_is_half_open(
        self, store: NotificationStore, clock: FixedClock
    ) -> None:
        start, end = clock.day_bounds()
        store.create(
            NotificationRecord(
                recipient_id="u-anna",
                category=NotificationCategory.OVERDUE,
                title="at start",
                message="...",
                created_at=start,
            )
        )
        store.create(
            NotificationRecord(
                recipient_id="u-anna",
                category=NotificationCategory.OVERDUE,
                title="at end",
                message="...",
                created_at=end,
            )
        )

        in_range = store.query(NotificationFilter(created_from=start, created_to=end))
        assert [r.title for r in in_range] == ["at start"]

    def test_query_orders_oldest_first(
        self, store: NotificationStore, clock: FixedClock
    ) -> None:
        later = store.create(record("u-later"))
        clock_earlier = clock.now() - timedelta(hours=2)
        store.create(
            NotificationRecord(
                recipient_id="u-earlier",
                category=NotificationCategory.ADVANCE_REMINDER,
                title="t",
                message="m",
                created_at=clock_earlier,
            )
        )

        results = store.query(NotificationFilter())
        assert [r.recipient_id for r in results] == ["u-earlier", later.recipient_id]

"""Tests for dual-channel delivery."""

import sqlite3
from typing import Any

import pytest

from fristwatch.config import EMAIL_REMINDERS_ENABLED_KEY
from fristwatch.delivery import NotificationDelivery
from fristwatch.models import (
    NotificationCategory,
    NotificationFilter,
    NotificationRecord,
    ResponsibleUser,
)
from fristwatch.notification_store import NotificationStore
from fristwatch.settings_store import SettingsStore

from tests.helpers import RecordingEmailChannel

ANNA = ResponsibleUser(id="u-anna", name="Anna Becker", email="anna@example.com")


def reminder() -> NotificationRecord:
    return NotificationRecord(
        recipient_id=ANNA.id,
        category=NotificationCategory.ADVANCE_REMINDER,
        title="Advance reminder: Appeal",
        message="Deadline expires on 26.10.2026 (7 days left).",
        payload={"deadline_id": "d-1", "case_id": "AZ 12/26", "offset_days": 7},
    )


class TestNotificationDelivery:
    """In-app first, email best-effort."""

    def test_delivers_on_both_channels(
        self, store: NotificationStore, settings_store: SettingsStore
    ) -> None:
        channel = RecordingEmailChannel()
        delivery = NotificationDelivery(store, channel, settings_store)

        stored = delivery.deliver(ANNA, reminder())

        assert stored.id is not None
        assert len(store.query(NotificationFilter())) == 1
        ((to, subject, text, html),) = channel.sent
        assert to == "anna@example.com"
        assert subject == "Advance reminder: Appeal"
        assert "Hello Anna Becker," in text
        assert "Case file: AZ 12/26" in text
        assert html.startswith("<div")

    def test_email_failure_does_not_block_in_app(
        self, store: NotificationStore, settings_store: SettingsStore
    ) -> None:
        delivery = NotificationDelivery(
            store, RecordingEmailChannel(fail=True), settings_store
        )

        stored = delivery.deliver(ANNA, reminder())

        assert stored.id is not None
        assert len(store.query(NotificationFilter())) == 1

    def test_unexpected_email_error_is_swallowed(
        self, store: NotificationStore, settings_store: SettingsStore, mocker: Any
    ) -> None:
        channel = RecordingEmailChannel()
        mocker.patch.object(channel, "send", side_effect=RuntimeError("boom"))
        delivery = NotificationDelivery(store, channel, settings_store)

        assert delivery.deliver(ANNA, reminder()).id is not None

    def test_in_app_failure_still_attempts_email(
        self, store: NotificationStore, settings_store: SettingsStore, mocker: Any
    ) -> None:
        channel = RecordingEmailChannel()
        mocker.patch.object(
            store, "create", side_effect=sqlite3.OperationalError("database is locked")
        )
        delivery = NotificationDelivery(store, channel, settings_store)

        with pytest.raises(sqlite3.OperationalError):
            delivery.deliver(ANNA, reminder())

        assert channel.recipients == ["anna@example.com"]

    def test_email_disabled_by_setting(
        self, store: NotificationStore, settings_store: SettingsStore
    ) -> None:
        channel = RecordingEmailChannel()
        settings_store.set(EMAIL_REMINDERS_ENABLED_KEY, False)
        delivery = NotificationDelivery(store, channel, settings_store)

        delivery.deliver(ANNA, reminder())

        assert channel.sent == []
        assert len(store.query(NotificationFilter())) == 1

    def test_email_disabled_by_default_flag(
        self, store: NotificationStore, settings_store: SettingsStore
    ) -> None:
        channel = RecordingEmailChannel()
        delivery = NotificationDelivery(
            store, channel, settings_store, email_enabled_default=False
        )

        delivery.deliver(ANNA, reminder())

        assert channel.sent == []

    def test_unconfigured_or_missing_channel(
        self, store: NotificationStore, settings_store: SettingsStore
    ) -> None:
        channel = RecordingEmailChannel(configured=False)
        NotificationDelivery(store, channel, settings_store).deliver(ANNA, reminder())
        NotificationDelivery(store, None, settings_store).deliver(ANNA, reminder())

        assert channel.sent == []
        assert len(store.query(NotificationFilter())) == 2

    def test_recipient_without_email(
        self, store: NotificationStore, settings_store: SettingsStore
    ) -> None:
        channel = RecordingEmailChannel()
        no_mail = ResponsibleUser(id="u-anna", name="Anna Becker")

        NotificationDelivery(store, channel, settings_store).deliver(no_mail, reminder())

        assert channel.sent == []

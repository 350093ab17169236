"""Dual-channel delivery: in-app store first, then best-effort email.

The two channels are independent failure domains. An email failure is
logged and dropped. An in-app failure is re-raised, but only after the
email attempt has run.
"""

import logging
from typing import Optional

from .config import EMAIL_REMINDERS_ENABLED_KEY
from .messages import email_text, plain_text_to_html
from .models import NotificationRecord, ResponsibleUser
from .notification_store import NotificationStore
from .notifiers.base import EmailChannel, NotificationError
from .settings_store import SettingsStore

logger = logging.getLogger(__name__)


class NotificationDelivery:
    """Emits one notification on the in-app and email channels."""

    def __init__(
        self,
        store: NotificationStore,
        email_channel: Optional[EmailChannel],
        settings_store: SettingsStore,
        email_enabled_default: bool = True,
    ):
        self.store = store
        self.email_channel = email_channel
        self.settings_store = settings_store
        self.email_enabled_default = email_enabled_default

    def email_enabled(self) -> bool:
        if self.email_channel is None or not self.email_channel.is_configured():
            return False
        return self.settings_store.get_typed(
            EMAIL_REMINDERS_ENABLED_KEY, self.email_enabled_default
        )

    def deliver(
        self, recipient: ResponsibleUser, record: NotificationRecord
    ) -> NotificationRecord:
        stored = None
        in_app_error: Optional[Exception] = None

        try:
            stored = self.store.create(record)
        except Exception as exc:
            in_app_error = exc
            logger.error(
                f"In-app notification for {recipient.id} failed "
                f"({record.category.value}, {record.deadline_id}): {exc}"
            )

        self._send_email(recipient, stored or record)

        if in_app_error is not None:
            raise in_app_error
        return stored

    def _send_email(self, recipient: ResponsibleUser, record: NotificationRecord) -> None:
        if not recipient.email or not self.email_enabled():
            return

        text = email_text(record, recipient)
        try:
            self.email_channel.send(
                recipient.email, record.title, text, html=plain_text_to_html(text)
            )
        except NotificationError as exc:
            logger.warning(f"Email to {recipient.id} failed: {exc}")
        except Exception as exc:
            logger.warning(f"Unexpected email channel error for {recipient.id}: {exc}")

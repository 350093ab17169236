"""Advance reminder (Vorfrist) dispatch with substitution routing."""

import logging

from . import messages
from .clock import Clock
from .dedup import DeduplicationGate
from .delivery import NotificationDelivery
from .models import (
    DeadlineEntry,
    NotificationCategory,
    NotificationRecord,
    ResponsibleUser,
)
from .substitution import SubstitutionResolver

logger = logging.getLogger(__name__)

CATEGORY = NotificationCategory.ADVANCE_REMINDER


class ReminderDispatcher:
    """Composes and emits advance reminders for one sweep."""

    def __init__(
        self,
        delivery: NotificationDelivery,
        gate: DeduplicationGate,
        resolver: SubstitutionResolver,
        clock: Clock,
    ):
        self.delivery = delivery
        self.gate = gate
        self.resolver = resolver
        self.clock = clock

    def dispatch_vorfrist(
        self,
        deadline: DeadlineEntry,
        responsible: ResponsibleUser,
        offset_days: int,
        is_catch_up: bool = False,
    ) -> bool:
        """Emit the reminder for ``offset_days``; False if already sent today."""
        if self.gate.already_sent(deadline.id, CATEGORY, offset_days):
            logger.debug(
                f"Advance reminder {deadline.id}/{offset_days} already sent today"
            )
            return False

        days_until = max(0, (deadline.effective_due_date - self.clock.today()).days)
        payload = {
            "deadline_id": deadline.id,
            "case_id": deadline.case_id,
            "offset_days": offset_days,
            "days_until": days_until,
            "catch_up": is_catch_up,
        }

        routing = self.resolver.resolve(responsible)
        if routing.is_delegated:
            substitute = routing.substitute
            title, message = messages.advance_reminder_for_substitute(
                deadline, responsible, days_until, is_catch_up
            )
            self.delivery.deliver(
                substitute,
                NotificationRecord(
                    recipient_id=substitute.id,
                    category=CATEGORY,
                    title=title,
                    message=message,
                    payload={**payload, "substituting_for": responsible.id},
                ),
            )

            title, message = messages.advance_reminder_delegated(
                deadline, substitute, days_until, is_catch_up
            )
            self.delivery.deliver(
                responsible,
                NotificationRecord(
                    recipient_id=responsible.id,
                    category=CATEGORY,
                    title=title,
                    message=message,
                    payload={**payload, "delegated_to": substitute.id},
                ),
            )

            logger.info(
                f"Advance reminder for {deadline.id} routed to substitute "
                f"{substitute.id} (original {responsible.id})"
            )
        else:
            title, message = messages.advance_reminder(
                deadline, days_until, is_catch_up
            )
            self.delivery.deliver(
                responsible,
                NotificationRecord(
                    recipient_id=responsible.id,
                    category=CATEGORY,
                    title=title,
                    message=message,
                    payload=payload,
                ),
            )

        return True

"""Overdue escalation: responsible -> substitute -> all active admins."""

import logging
from typing import List, Optional, Set

from . import messages
from .dedup import DeduplicationGate
from .delivery import NotificationDelivery
from .models import (
    DeadlineEntry,
    NotificationCategory,
    NotificationRecord,
    ResponsibleUser,
)
from .repository import DeadlineRepository
from .substitution import SubstitutionResolver

logger = logging.getLogger(__name__)

CATEGORY = NotificationCategory.OVERDUE


class EscalationDispatcher:
    """Emits the overdue escalation chain at most once per local day."""

    def __init__(
        self,
        delivery: NotificationDelivery,
        gate: DeduplicationGate,
        resolver: SubstitutionResolver,
        repository: DeadlineRepository,
    ):
        self.delivery = delivery
        self.gate = gate
        self.resolver = resolver
        self.repository = repository
        self._admins: Optional[List[ResponsibleUser]] = None

    def admins(self) -> List[ResponsibleUser]:
        if self._admins is None:
            self._admins = self.repository.list_active_admins()
        return self._admins

    def dispatch_overdue(
        self, deadline: DeadlineEntry, responsible: ResponsibleUser
    ) -> bool:
        """Run the escalation chain; False if it already ran today."""
        if self.gate.already_sent(deadline.id, CATEGORY):
            logger.debug(f"Overdue escalation for {deadline.id} already sent today")
            return False

        base_payload = {"deadline_id": deadline.id, "case_id": deadline.case_id}
        notified: Set[str] = set()

        # 1. Responsible party, always
        title, message = messages.overdue_for_responsible(deadline)
        self._emit(responsible, title, message, base_payload)
        notified.add(responsible.id)

        # 2. Substitute, while the responsible party is away
        routing = self.resolver.resolve(responsible)
        substitute = routing.substitute
        if substitute is not None and substitute.id not in notified:
            title, message = messages.overdue_for_substitute(deadline, responsible)
            self._emit(
                substitute,
                title,
                message,
                {**base_payload, "substituting_for": responsible.id},
            )
            notified.add(substitute.id)

        # 3. Every active admin not yet notified
        for admin in self.admins():
            if admin.id in notified:
                continue
            title, message = messages.overdue_for_admin(deadline, responsible)
            self._emit(
                admin,
                title,
                message,
                {**base_payload, "responsible_id": responsible.id},
            )
            notified.add(admin.id)

        logger.info(
            f"Overdue escalation for {deadline.id} sent to {len(notified)} recipient(s)"
        )
        return True

    def _emit(self, recipient: ResponsibleUser, title: str, message: str, payload):
        self.delivery.deliver(
            recipient,
            NotificationRecord(
                recipient_id=recipient.id,
                category=CATEGORY,
                title=title,
                message=message,
                payload=payload,
            ),
        )

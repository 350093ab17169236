"""Substitution (deputy) resolution for away users."""

import logging
from datetime import datetime
from typing import Dict

from .models import ActiveSubstitute, NoSubstitute, ResponsibleUser, Routing

logger = logging.getLogger(__name__)


class SubstitutionResolver:
    """Resolves who receives a user's notifications.

    Routings are cached per user id; create one resolver per sweep so a
    routing is resolved once and stays stable for that sweep.
    """

    def __init__(self, now: datetime):
        self.now = now
        self._cache: Dict[str, Routing] = {}

    def resolve(self, user: ResponsibleUser) -> Routing:
        if user.id not in self._cache:
            self._cache[user.id] = Routing(
                original=user, substitution=self._substitution_for(user)
            )
        return self._cache[user.id]

    def _substitution_for(self, user: ResponsibleUser):
        if not user.is_away(self.now):
            return NoSubstitute()

        substitute = user.substitute
        if substitute is None:
            return NoSubstitute()

        if substitute.id == user.id:
            logger.warning(f"User {user.id} is configured as their own substitute")
            return NoSubstitute()

        if substitute.is_away(self.now):
            # Single hop only; the substitute's own substitute is not followed
            logger.warning(
                f"Substitute {substitute.id} for {user.id} is flagged away; "
                "routing to them anyway"
            )

        return ActiveSubstitute(substitute)

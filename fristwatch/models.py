"""
Fristwatch data model - deadlines, responsible users and notification records

Deadline entries and users are owned by the case-management application;
this engine only reads them (except for the substitution expiry step).
Notification records form the append-only delivery ledger.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class NotificationCategory(Enum):
    """Category of an emitted deadline notification."""

    ADVANCE_REMINDER = "deadline:advance_reminder"
    OVERDUE = "deadline:overdue"


class UserRole(Enum):
    """Roles relevant to the escalation chain."""

    ADMIN = "admin"
    LAWYER = "lawyer"
    STAFF = "staff"


@dataclass
class ResponsibleUser:
    """A person who owns deadlines and may be away with a substitute."""

    id: str
    name: str
    email: Optional[str] = None
    role: UserRole = UserRole.STAFF
    active: bool = True

    # Away / substitution state
    away: bool = False
    away_from: Optional[datetime] = None
    away_until: Optional[datetime] = None
    substitute_id: Optional[str] = None
    substitute: Optional["ResponsibleUser"] = None

    def __post_init__(self) -> None:
        """Ensure away bounds are timezone-aware."""
        if self.away_from is not None and self.away_from.tzinfo is None:
            self.away_from = self.away_from.replace(tzinfo=timezone.utc)
        if self.away_until is not None and self.away_until.tzinfo is None:
            self.away_until = self.away_until.replace(tzinfo=timezone.utc)

    def is_away(self, now: datetime) -> bool:
        """Return True if the user is currently away.

        Away requires the flag plus ``now`` inside the optional bounds. A flag
        with no bounds at all means away indefinitely.
        """
        if not self.away:
            return False
        if self.away_from is not None and now < self.away_from:
            return False
        if self.away_until is not None and now > self.away_until:
            return False
        return True


@dataclass
class DeadlineEntry:
    """A tracked legal deadline."""

    id: str
    title: str
    due_date: date
    hard_due_date: Optional[date] = None  # statutory cutoff, wins over due_date
    case_id: Optional[str] = None
    jurisdiction: Optional[str] = None
    reminder_dates: List[date] = field(default_factory=list)
    halfway_date: Optional[date] = None
    resolved: bool = False
    responsible_id: Optional[str] = None
    responsible: Optional[ResponsibleUser] = None

    @property
    def effective_due_date(self) -> date:
        """Due date used for all day-count math."""
        return self.hard_due_date or self.due_date

    def reminder_targets(self) -> List[date]:
        """All advance reminder dates including the half-way reminder, sorted."""
        targets = set(self.reminder_dates)
        if self.halfway_date is not None:
            targets.add(self.halfway_date)
        return sorted(targets)

    def offset_days(self, target: date) -> int:
        """Calendar days between a reminder date and the effective due date."""
        return (self.effective_due_date - target).days


@dataclass
class NotificationRecord:
    """Immutable emission record; also the deduplication ledger entry."""

    recipient_id: str
    category: NotificationCategory
    title: str
    message: str
    payload: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    id: Optional[int] = None

    @property
    def deadline_id(self) -> Optional[str]:
        return self.payload.get("deadline_id")

    @property
    def is_catch_up(self) -> bool:
        return bool(self.payload.get("catch_up", False))


@dataclass
class NotificationFilter:
    """Query filter for the notification store."""

    category: Optional[NotificationCategory] = None
    recipient_id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    created_from: Optional[datetime] = None  # inclusive
    created_to: Optional[datetime] = None  # exclusive

    def matches_payload(self, payload: Dict[str, Any]) -> bool:
        return all(payload.get(key) == value for key, value in self.payload.items())


# =============================================================================
# Substitution routing
# =============================================================================


@dataclass(frozen=True)
class NoSubstitute:
    """The user is present, or away without a usable substitute."""


@dataclass(frozen=True)
class ActiveSubstitute:
    """The user is away and ``user`` handles their deadlines."""

    user: ResponsibleUser


Substitution = Union[NoSubstitute, ActiveSubstitute]


@dataclass(frozen=True)
class Routing:
    """Resolved recipients for one responsible user."""

    original: ResponsibleUser
    substitution: Substitution

    @property
    def is_delegated(self) -> bool:
        return isinstance(self.substitution, ActiveSubstitute)

    @property
    def substitute(self) -> Optional[ResponsibleUser]:
        if isinstance(self.substitution, ActiveSubstitute):
            return self.substitution.user
        return None

    @property
    def effective_recipient(self) -> ResponsibleUser:
        return self.substitute or self.original

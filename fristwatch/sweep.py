"""
Deadline sweep - the periodic run that drives reminders and escalations

One sweep: expire stale substitutions, then for every open deadline
evaluate advance reminders (including catch-up) and overdue escalation.
A failure on one deadline is logged and never stops the others.
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .clock import Clock, SystemClock
from .config import CATCH_UP_MAX_AGE_DAYS_KEY, Settings, settings
from .database import DatabaseManager
from .dedup import DeduplicationGate
from .delivery import NotificationDelivery
from .escalation import EscalationDispatcher
from .fire_dates import FireDateEvaluator
from .holiday_oracle import GermanHolidayOracle, HolidayOracle
from .models import DeadlineEntry, NotificationCategory
from .notification_store import NotificationStore
from .notifiers.base import EmailChannel
from .notifiers.email import SmtpEmailChannel
from .reminders import ReminderDispatcher
from .repository import DeadlineRepository
from .settings_store import SettingsStore
from .substitution import SubstitutionResolver

logger = logging.getLogger(__name__)


class SweepState(Enum):
    INIT = "init"
    EXPIRE_SUBSTITUTIONS = "expire_substitutions"
    PROCESS_DEADLINES = "process_deadlines"
    DONE = "done"


@dataclass
class SweepResult:
    """Counts reported by one sweep."""

    expired_substitutions: int = 0
    reminders_sent: int = 0
    escalations_sent: int = 0
    failures: int = 0
    skipped: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DeadlineSweep:
    """Run coordinator for a single sweep."""

    def __init__(
        self,
        repository: DeadlineRepository,
        store: NotificationStore,
        oracle: HolidayOracle,
        email_channel: Optional[EmailChannel],
        settings_store: SettingsStore,
        clock: Clock,
        default_jurisdiction: str = "NW",
        email_enabled_default: bool = True,
        catch_up_max_age_default: int = 3,
    ):
        self.repository = repository
        self.store = store
        self.oracle = oracle
        self.email_channel = email_channel
        self.settings_store = settings_store
        self.clock = clock
        self.default_jurisdiction = default_jurisdiction
        self.email_enabled_default = email_enabled_default
        self.catch_up_max_age_default = catch_up_max_age_default

        self.gate = DeduplicationGate(store, clock)
        self.evaluator = FireDateEvaluator(clock, oracle)
        self.delivery = NotificationDelivery(
            store,
            email_channel,
            settings_store,
            email_enabled_default=email_enabled_default,
        )
        self.state = SweepState.INIT

    def _transition(self, state: SweepState) -> None:
        logger.debug(f"Sweep state {self.state.value} -> {state.value}")
        self.state = state

    def run(self) -> SweepResult:
        result = SweepResult()
        logger.info(f"Starting deadline sweep for {self.clock.today().isoformat()}")

        # Expiry must finish before any routing is resolved
        self._transition(SweepState.EXPIRE_SUBSTITUTIONS)
        result.expired_substitutions = self.repository.expire_substitutions(
            self.clock.now()
        )

        self._transition(SweepState.PROCESS_DEADLINES)
        deadlines, unreadable = self.repository.load_open_deadlines()
        result.skipped += unreadable

        # Routing is resolved once per sweep, after expiry
        resolver = SubstitutionResolver(self.clock.now())
        self.reminders = ReminderDispatcher(
            self.delivery, self.gate, resolver, self.clock
        )
        self.escalations = EscalationDispatcher(
            self.delivery, self.gate, resolver, self.repository
        )

        for deadline in deadlines:
            if deadline.resolved:
                continue

            if deadline.responsible is None:
                logger.warning(
                    f"Deadline {deadline.id} has no responsible user; skipping"
                )
                result.skipped += 1
                continue

            try:
                self._process_deadline(deadline, result)
            except Exception:
                logger.exception(f"Failed to process deadline {deadline.id}")
                result.failures += 1

        self._transition(SweepState.DONE)
        logger.info(
            f"Deadline sweep complete: {result.expired_substitutions} expired, "
            f"{result.reminders_sent} reminders, {result.escalations_sent} "
            f"escalations, {result.failures} failures"
        )
        return result

    def _process_deadline(self, deadline: DeadlineEntry, result: SweepResult) -> None:
        responsible = deadline.responsible
        jurisdiction = deadline.jurisdiction or self.default_jurisdiction
        today = self.clock.today()
        due = deadline.effective_due_date
        max_age = self.settings_store.get_typed(
            CATCH_UP_MAX_AGE_DAYS_KEY, self.catch_up_max_age_default
        )

        handled_offsets = set()
        for target in deadline.reminder_targets():
            offset = deadline.offset_days(target)
            if offset in handled_offsets:
                continue

            if self.evaluator.should_fire_today(target, jurisdiction):
                handled_offsets.add(offset)
                if self.reminders.dispatch_vorfrist(deadline, responsible, offset):
                    result.reminders_sent += 1
            elif due >= today and self._needs_catch_up(
                deadline, target, offset, jurisdiction, max_age
            ):
                handled_offsets.add(offset)
                if self.reminders.dispatch_vorfrist(
                    deadline, responsible, offset, is_catch_up=True
                ):
                    result.reminders_sent += 1

        if due < today:
            if self.escalations.dispatch_overdue(deadline, responsible):
                result.escalations_sent += 1

    def _needs_catch_up(self, deadline, target, offset, jurisdiction, max_age) -> bool:
        """Past target within the age window that was never delivered."""
        if not self.evaluator.is_catch_up_eligible(target, max_age):
            return False

        fire_date = self.evaluator.scheduled_fire_date(target, jurisdiction)
        return not self.gate.sent_since(
            deadline.id,
            NotificationCategory.ADVANCE_REMINDER,
            since=fire_date,
            offset_days=offset,
        )


def build_sweep(
    app_settings: Settings,
    clock: Clock,
    db: DatabaseManager,
    oracle: Optional[HolidayOracle] = None,
    email_channel: Optional[EmailChannel] = None,
) -> DeadlineSweep:
    """Wire a sweep from configuration."""
    return DeadlineSweep(
        repository=DeadlineRepository(db),
        store=NotificationStore(db, clock),
        oracle=oracle or GermanHolidayOracle(),
        email_channel=email_channel or SmtpEmailChannel.from_settings(app_settings),
        settings_store=SettingsStore(db, clock),
        clock=clock,
        default_jurisdiction=app_settings.default_jurisdiction,
        email_enabled_default=app_settings.email_reminders_enabled,
        catch_up_max_age_default=app_settings.catch_up_max_age_days,
    )


def run_deadline_sweep(
    app_settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    oracle: Optional[HolidayOracle] = None,
    email_channel: Optional[EmailChannel] = None,
) -> SweepResult:
    """Entry point for the scheduler: run one sweep and record it."""
    app_settings = app_settings or settings
    clock = clock or SystemClock(app_settings.timezone)

    db = DatabaseManager(app_settings.database_file)
    db.ensure_schema()

    started_at = clock.now()
    result = build_sweep(app_settings, clock, db, oracle, email_channel).run()
    db.record_sweep_run(
        started_at,
        clock.now(),
        expired_substitutions=result.expired_substitutions,
        reminders_sent=result.reminders_sent,
        escalations_sent=result.escalations_sent,
        failures=result.failures,
    )
    return result

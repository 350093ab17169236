"""
Fire-date evaluation - when does a reminder fire, and may it be caught up?

A reminder that would land on a weekend is pulled forward to the preceding
Friday. A reminder on a public holiday, or a weekend reminder whose Friday is
one, walks back to the nearest earlier business day. Reminders are never
pushed later.

Catch-up age is counted from the target date, not from the shifted fire date.
"""

from datetime import date, timedelta

from .clock import Clock
from .holiday_oracle import HolidayOracle, is_weekend

MAX_HOLIDAY_SHIFT_STEPS = 5

SATURDAY = 5
SUNDAY = 6


class FireDateEvaluator:
    """Decides whether a reminder target date fires today."""

    def __init__(self, clock: Clock, oracle: HolidayOracle):
        self.clock = clock
        self.oracle = oracle

    def scheduled_fire_date(self, target: date, jurisdiction: str) -> date:
        """The single local day on which the reminder for ``target`` fires."""
        shifted = target
        weekday = target.weekday()
        if weekday == SATURDAY:
            shifted -= timedelta(days=1)
        elif weekday == SUNDAY:
            shifted -= timedelta(days=2)

        # A Friday reached from the weekend may itself be a holiday
        if self.oracle.is_holiday(shifted, jurisdiction):
            for _ in range(MAX_HOLIDAY_SHIFT_STEPS):
                shifted -= timedelta(days=1)
                if not is_weekend(shifted) and not self.oracle.is_holiday(
                    shifted, jurisdiction
                ):
                    break

        return shifted

    def should_fire_today(self, target: date, jurisdiction: str) -> bool:
        return self.scheduled_fire_date(target, jurisdiction) == self.clock.today()

    def catch_up_age(self, target: date) -> int:
        """Whole days between ``target`` and today (positive when in the past)."""
        return (self.clock.today() - target).days

    def is_catch_up_eligible(self, target: date, max_age_days: int) -> bool:
        """A past target qualifies while its age is within ``max_age_days``.

        The boundary is inclusive.
        """
        age = self.catch_up_age(target)
        return 0 < age <= max_age_days

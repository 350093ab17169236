"""Reminder-date planning for new deadlines.

Reminder dates are stored on the deadline as absolute dates. Each one is
computed as calendar days before the due date and, when it falls on a
weekend or public holiday, moved to the previous business day (never the
next one, unlike the due date itself).
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional

from .holiday_oracle import HolidayOracle, is_weekend

DEFAULT_REMINDER_OFFSETS = (7, 3, 1)

# Half-period reminders only for periods longer than two weeks
HALF_PERIOD_MIN_DAYS = 14


@dataclass(frozen=True)
class PlannedReminder:
    days_before: int
    date: date
    shifted: bool
    original_date: date


def previous_or_same_business_day(
    day: date, jurisdiction: str, oracle: HolidayOracle
) -> date:
    current = day
    while is_weekend(current) or oracle.is_holiday(current, jurisdiction):
        current -= timedelta(days=1)
    return current


def plan_advance_reminders(
    due_date: date,
    days_before: Iterable[int],
    jurisdiction: str,
    oracle: HolidayOracle,
) -> List[PlannedReminder]:
    """One planned reminder per offset, in the order given."""
    planned = []
    for offset in days_before:
        original = due_date - timedelta(days=offset)
        actual = previous_or_same_business_day(original, jurisdiction, oracle)
        planned.append(
            PlannedReminder(
                days_before=offset,
                date=actual,
                shifted=actual != original,
                original_date=original,
            )
        )
    return planned


def half_period_reminder(
    start_date: date, due_date: date, jurisdiction: str, oracle: HolidayOracle
) -> Optional[date]:
    """Midpoint reminder for long periods, or None for short ones."""
    total_days = (due_date - start_date).days
    if total_days <= HALF_PERIOD_MIN_DAYS:
        return None

    midpoint = start_date + timedelta(days=total_days // 2)
    return previous_or_same_business_day(midpoint, jurisdiction, oracle)

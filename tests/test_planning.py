"""Tests for reminder-date planning."""

from datetime import date

from fristwatch.holiday_oracle import GermanHolidayOracle
from fristwatch.planning import (
    DEFAULT_REMINDER_OFFSETS,
    PlannedReminder,
    half_period_reminder,
    plan_advance_reminders,
    previous_or_same_business_day,
)


def test_default_offsets() -> None:
    assert DEFAULT_REMINDER_OFFSETS == (7, 3, 1)


def test_plan_shifts_weekend_back(oracle: GermanHolidayOracle) -> None:
    planned = plan_advance_reminders(
        date(2026, 10, 26), DEFAULT_REMINDER_OFFSETS, "NW", oracle
    )

    assert planned == [
        PlannedReminder(7, date(2026, 10, 19), False, date(2026, 10, 19)),
        PlannedReminder(3, date(2026, 10, 23), False, date(2026, 10, 23)),
        PlannedReminder(1, date(2026, 10, 23), True, date(2026, 10, 25)),
    ]


def test_plan_shifts_holiday_back(oracle: GermanHolidayOracle) -> None:
    (planned,) = plan_advance_reminders(date(2026, 5, 8), [7], "NW", oracle)

    assert planned.original_date == date(2026, 5, 1)
    assert planned.date == date(2026, 4, 30)
    assert planned.shifted


def test_previous_or_same_business_day(oracle: GermanHolidayOracle) -> None:
    assert previous_or_same_business_day(date(2026, 10, 19), "NW", oracle) == date(
        2026, 10, 19
    )
    assert previous_or_same_business_day(date(2026, 4, 6), "NW", oracle) == date(
        2026, 4, 2
    )


class TestHalfPeriodReminder:
    """Half-way reminders for long periods."""

    def test_short_period_has_none(self, oracle: GermanHolidayOracle) -> None:
        assert (
            half_period_reminder(date(2026, 10, 1), date(2026, 10, 15), "NW", oracle)
            is None
        )

    def test_midpoint(self, oracle: GermanHolidayOracle) -> None:
        # 36 days, midpoint Monday 19.10.
        assert half_period_reminder(
            date(2026, 10, 1), date(2026, 11, 6), "NW", oracle
        ) == date(2026, 10, 19)

    def test_midpoint_on_weekend_moves_back(
        self, oracle: GermanHolidayOracle
    ) -> None:
        # 20 days, midpoint Sunday 11.10.
        assert half_period_reminder(
            date(2026, 10, 1), date(2026, 10, 21), "NW", oracle
        ) == date(2026, 10, 9)

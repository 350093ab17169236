"""Tests for the German public holiday oracle."""

from datetime import date

import pytest

from fristwatch.holiday_oracle import JURISDICTIONS, GermanHolidayOracle, is_weekend


class TestGermanHolidayOracle:
    """Holiday lookups per federal state."""

    def test_nationwide_holiday(self, oracle: GermanHolidayOracle) -> None:
        # German Unity Day
        for code in JURISDICTIONS:
            assert oracle.is_holiday(date(2026, 10, 3), code)

    def test_regional_holiday(self, oracle: GermanHolidayOracle) -> None:
        # Corpus Christi 2026 is observed in NW and BY, not in Berlin
        corpus_christi = date(2026, 6, 4)
        assert oracle.is_holiday(corpus_christi, "NW")
        assert oracle.is_holiday(corpus_christi, "BY")
        assert not oracle.is_holiday(corpus_christi, "BE")

    def test_regular_day(self, oracle: GermanHolidayOracle) -> None:
        assert not oracle.is_holiday(date(2026, 10, 19), "NW")

    def test_jurisdiction_case_insensitive(self, oracle: GermanHolidayOracle) -> None:
        assert oracle.is_holiday(date(2026, 5, 1), "nw")

    def test_holiday_name(self, oracle: GermanHolidayOracle) -> None:
        assert oracle.holiday_name(date(2026, 12, 25), "NW")
        assert oracle.holiday_name(date(2026, 12, 23), "NW") is None

    def test_business_day(self, oracle: GermanHolidayOracle) -> None:
        assert oracle.is_business_day(date(2026, 10, 19), "NW")
        assert not oracle.is_business_day(date(2026, 10, 24), "NW")  # Saturday
        assert not oracle.is_business_day(date(2026, 4, 3), "NW")  # Good Friday

    def test_caches_per_jurisdiction_and_year(
        self, oracle: GermanHolidayOracle
    ) -> None:
        oracle.is_holiday(date(2026, 1, 1), "NW")
        oracle.is_holiday(date(2026, 12, 31), "NW")
        oracle.is_holiday(date(2027, 1, 1), "NW")
        oracle.is_holiday(date(2026, 1, 1), "BY")

        assert set(oracle._cache) == {("NW", 2026), ("NW", 2027), ("BY", 2026)}

    def test_unknown_jurisdiction_raises(self, oracle: GermanHolidayOracle) -> None:
        with pytest.raises(NotImplementedError):
            oracle.is_holiday(date(2026, 10, 19), "XX")


def test_is_weekend() -> None:
    assert is_weekend(date(2026, 10, 24))
    assert is_weekend(date(2026, 10, 25))
    assert not is_weekend(date(2026, 10, 23))

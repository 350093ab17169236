"""
Holiday oracle - public holiday lookup per German federal state

Backed by the ``holidays`` library. Holiday sets are built lazily and cached
per (jurisdiction, year).
"""

import logging
from datetime import date
from typing import Dict, Optional, Protocol, Tuple

import holidays as hlib

logger = logging.getLogger(__name__)

# All 16 German federal states (Bundeslaender)
JURISDICTIONS = (
    "BW",  # Baden-Wuerttemberg
    "BY",  # Bayern
    "BE",  # Berlin
    "BB",  # Brandenburg
    "HB",  # Bremen
    "HE",  # Hessen
    "HH",  # Hamburg
    "MV",  # Mecklenburg-Vorpommern
    "NI",  # Niedersachsen
    "NW",  # Nordrhein-Westfalen
    "RP",  # Rheinland-Pfalz
    "SL",  # Saarland
    "SN",  # Sachsen
    "ST",  # Sachsen-Anhalt
    "SH",  # Schleswig-Holstein
    "TH",  # Thueringen
)


class HolidayOracle(Protocol):
    """Protocol for public holiday lookups."""

    def is_holiday(self, day: date, jurisdiction: str) -> bool:
        ...


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


class GermanHolidayOracle:
    """Public holidays for German federal states."""

    def __init__(self) -> None:
        self._cache: Dict[Tuple[str, int], Dict[date, str]] = {}

    def _holidays_for(self, jurisdiction: str, year: int) -> Dict[date, str]:
        key = (jurisdiction, year)
        if key not in self._cache:
            # Unknown subdivisions raise NotImplementedError from the library
            self._cache[key] = dict(hlib.Germany(subdiv=jurisdiction, years=year))
            logger.debug(
                f"Loaded {len(self._cache[key])} holidays for {jurisdiction} {year}"
            )
        return self._cache[key]

    def is_holiday(self, day: date, jurisdiction: str) -> bool:
        return day in self._holidays_for(jurisdiction.upper(), day.year)

    def holiday_name(self, day: date, jurisdiction: str) -> Optional[str]:
        return self._holidays_for(jurisdiction.upper(), day.year).get(day)

    def is_business_day(self, day: date, jurisdiction: str) -> bool:
        """Neither Saturday, Sunday nor a public holiday."""
        return not is_weekend(day) and not self.is_holiday(day, jurisdiction)

"""Injectable clocks so sweeps can run against a simulated "today"."""

from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

import pytz


class Clock(ABC):
    """Base clock; subclasses provide ``now``."""

    def __init__(self, timezone_name: str = "Europe/Berlin"):
        self.tz = pytz.timezone(timezone_name)

    @abstractmethod
    def now(self) -> datetime:
        """Current timezone-aware instant."""

    def today(self) -> date:
        """Current local calendar date."""
        return self.now().astimezone(self.tz).date()

    def start_of_day(self, day: date) -> datetime:
        """Local midnight at the start of ``day`` (timezone-aware)."""
        return self.tz.localize(datetime.combine(day, time.min))

    def day_bounds(self, day: Optional[date] = None) -> Tuple[datetime, datetime]:
        """Return the half-open local day window ``[start, next_start)``."""
        day = day or self.today()
        return self.start_of_day(day), self.start_of_day(day + timedelta(days=1))


class SystemClock(Clock):
    """Wall-clock time in the configured timezone."""

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock(Clock):
    """Clock frozen at a given instant; naive values are taken as local time."""

    def __init__(self, now: datetime, timezone_name: str = "Europe/Berlin"):
        super().__init__(timezone_name)
        if now.tzinfo is None:
            now = self.tz.localize(now)
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs: float) -> None:
        """Move the clock forward by ``timedelta(**kwargs)``."""
        self._now = self.tz.normalize(self._now + timedelta(**kwargs))

    @classmethod
    def at(
        cls, day: date, hour: int = 6, timezone_name: str = "Europe/Berlin"
    ) -> "FixedClock":
        """Clock at ``hour`` o'clock local time on ``day``."""
        return cls(datetime.combine(day, time(hour=hour)), timezone_name)

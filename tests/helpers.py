"""Shared test doubles and date helpers."""

from datetime import date, datetime
from typing import List, Optional, Tuple

from fristwatch.clock import FixedClock
from fristwatch.notifiers.base import NotificationError

# Monday
TODAY = date(2026, 10, 19)


class RecordingEmailChannel:
    """Email channel double that records sends or fails on demand."""

    def __init__(self, configured: bool = True, fail: bool = False):
        self.configured = configured
        self.fail = fail
        self.sent: List[Tuple[str, str, str, Optional[str]]] = []

    def is_configured(self) -> bool:
        return self.configured

    def send(
        self, to: str, subject: str, text: str, html: Optional[str] = None
    ) -> None:
        if self.fail:
            raise NotificationError("Email notification failed: SMTP unreachable")
        self.sent.append((to, subject, text, html))

    @property
    def recipients(self) -> List[str]:
        return [to for to, _, _, _ in self.sent]


def local(day: date, hour: int = 0, minute: int = 0) -> datetime:
    """Aware local datetime in the default timezone."""
    return FixedClock.at(day, hour=hour).now().replace(minute=minute)

"""Pytest configuration and fixtures."""

from datetime import date
from pathlib import Path
from typing import Any, Callable, List

import pytest

from fristwatch.clock import Clock, FixedClock
from fristwatch.database import DatabaseManager
from fristwatch.holiday_oracle import GermanHolidayOracle
from fristwatch.models import DeadlineEntry, ResponsibleUser, UserRole
from fristwatch.notification_store import NotificationStore
from fristwatch.repository import DeadlineRepository
from fristwatch.settings_store import SettingsStore
from fristwatch.sweep import DeadlineSweep

from tests.helpers import TODAY, RecordingEmailChannel


@pytest.fixture
def db(tmp_path: Path) -> DatabaseManager:
    """Temporary SQLite database with the full schema."""
    manager = DatabaseManager(str(tmp_path / "fristwatch.db"))
    manager.ensure_schema()
    return manager


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock.at(TODAY)


@pytest.fixture
def oracle() -> GermanHolidayOracle:
    return GermanHolidayOracle()


@pytest.fixture
def repository(db: DatabaseManager) -> DeadlineRepository:
    return DeadlineRepository(db)


@pytest.fixture
def store(db: DatabaseManager, clock: FixedClock) -> NotificationStore:
    return NotificationStore(db, clock)


@pytest.fixture
def settings_store(db: DatabaseManager, clock: FixedClock) -> SettingsStore:
    return SettingsStore(db, clock)


@pytest.fixture
def email_channel() -> RecordingEmailChannel:
    return RecordingEmailChannel()


@pytest.fixture
def make_sweep(
    db: DatabaseManager,
    repository: DeadlineRepository,
    oracle: GermanHolidayOracle,
    email_channel: RecordingEmailChannel,
) -> Callable[..., DeadlineSweep]:
    """Factory for sweeps bound to a given clock."""

    def _make(clock: Clock, channel: Any = None, **kwargs: Any) -> DeadlineSweep:
        return DeadlineSweep(
            repository=repository,
            store=NotificationStore(db, clock),
            oracle=oracle,
            email_channel=channel if channel is not None else email_channel,
            settings_store=SettingsStore(db, clock),
            clock=clock,
            **kwargs,
        )

    return _make


@pytest.fixture
def lawyer(repository: DeadlineRepository) -> ResponsibleUser:
    return repository.add_user(
        ResponsibleUser(
            id="u-anna",
            name="Anna Becker",
            email="anna@example.com",
            role=UserRole.LAWYER,
        )
    )


@pytest.fixture
def colleague(repository: DeadlineRepository) -> ResponsibleUser:
    return repository.add_user(
        ResponsibleUser(
            id="u-ben",
            name="Ben Schulz",
            email="ben@example.com",
            role=UserRole.LAWYER,
        )
    )


@pytest.fixture
def admins(repository: DeadlineRepository) -> List[ResponsibleUser]:
    return [
        repository.add_user(
            ResponsibleUser(
                id="u-admin-1",
                name="Clara Admin",
                email="clara@example.com",
                role=UserRole.ADMIN,
            )
        ),
        repository.add_user(
            ResponsibleUser(
                id="u-admin-2",
                name="Dirk Admin",
                email="dirk@example.com",
                role=UserRole.ADMIN,
            )
        ),
        repository.add_user(
            ResponsibleUser(
                id="u-admin-old",
                name="Former Admin",
                email="former@example.com",
                role=UserRole.ADMIN,
                active=False,
            )
        ),
    ]


@pytest.fixture
def add_deadline(repository: DeadlineRepository) -> Callable[..., DeadlineEntry]:
    """Insert a deadline; keyword arguments override the defaults."""
    counter = {"n": 0}

    def _add(**kwargs: Any) -> DeadlineEntry:
        counter["n"] += 1
        values = {
            "id": f"d-{counter['n']}",
            "title": f"Statement of defence {counter['n']}",
            "due_date": date(2026, 10, 26),
            "case_id": "AZ 12/26",
            "responsible_id": "u-anna",
        }
        values.update(kwargs)
        return repository.add_deadline(DeadlineEntry(**values))

    return _add


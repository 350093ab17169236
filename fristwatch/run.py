"""Main entry point for Fristwatch."""

import json
import logging
import sys
from datetime import date, datetime
from typing import List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .clock import Clock, FixedClock, SystemClock
from .config import settings
from .database import DatabaseManager
from .holiday_oracle import JURISDICTIONS, GermanHolidayOracle
from .messages import format_date
from .planning import (
    DEFAULT_REMINDER_OFFSETS,
    half_period_reminder,
    plan_advance_reminders,
)
from .repository import DeadlineRepository, SubstitutionError
from .scheduler import start_scheduler
from .sweep import run_deadline_sweep

console = Console()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ"),
            "message": record.getMessage(),
            "name": record.name,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


# Configure logging
def setup_logging(level: str) -> None:
    """Set up logging with Rich handler or JSON lines."""
    log_level = getattr(logging, level.upper())
    if settings.log_json:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logging.basicConfig(level=log_level, handlers=[handler])
    else:
        logging.basicConfig(
            level=log_level,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=console, rich_tracebacks=True)],
        )


logger = logging.getLogger(__name__)


def _open_database() -> DatabaseManager:
    db = DatabaseManager(settings.database_file)
    db.ensure_schema()
    return db


def _parse_offsets(ctx, param, value: str) -> List[int]:
    try:
        offsets = [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise click.BadParameter("expected comma-separated day counts, e.g. 7,3,1")
    if not offsets or any(offset < 0 for offset in offsets):
        raise click.BadParameter("day counts must be non-negative")
    return offsets


def _localize(clock: Clock, value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return clock.tz.localize(value)


@click.group()
def main() -> None:
    """Fristwatch deadline reminder engine."""


@main.command()
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Simulate the sweep for this local date",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(LOG_LEVELS),
    help="Set logging level",
)
def sweep(today: Optional[datetime], log_level: Optional[str]) -> None:
    """Run one deadline sweep now."""
    setup_logging(log_level or settings.log_level)

    clock: Clock
    if today is not None:
        clock = FixedClock.at(
            today.date(), hour=settings.sweep_hour, timezone_name=settings.timezone
        )
    else:
        clock = SystemClock(settings.timezone)

    logger.info(f"🔔 Starting deadline sweep for {clock.today().isoformat()}")
    result = run_deadline_sweep(settings, clock=clock)

    table = Table(title=f"Deadline sweep {clock.today().isoformat()}")
    table.add_column("Metric")
    table.add_column("Count", justify="right")
    for key, value in result.to_dict().items():
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)

    if result.failures:
        console.print(f"[red]❌ {result.failures} deadline(s) failed[/red]")
        sys.exit(1)


@main.command()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(LOG_LEVELS),
    help="Set logging level",
)
def schedule(log_level: Optional[str]) -> None:
    """Run the daily sweep on a schedule (blocking)."""
    setup_logging(log_level or settings.log_level)
    start_scheduler(settings)


@main.command()
@click.argument("due_date", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option(
    "--days",
    default=",".join(str(d) for d in DEFAULT_REMINDER_OFFSETS),
    show_default=True,
    callback=_parse_offsets,
    help="Comma-separated reminder offsets in days",
)
@click.option(
    "--start",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Period start; adds a half-way reminder for long periods",
)
@click.option(
    "--jurisdiction",
    type=click.Choice(JURISDICTIONS, case_sensitive=False),
    default=None,
    help="Federal state code for public holidays",
)
def plan(
    due_date: datetime,
    days: List[int],
    start: Optional[datetime],
    jurisdiction: Optional[str],
) -> None:
    """Show the reminder dates planned for a deadline."""
    jurisdiction = (jurisdiction or settings.default_jurisdiction).upper()
    oracle = GermanHolidayOracle()
    due: date = due_date.date()

    table = Table(title=f"Reminders for {format_date(due)} ({jurisdiction})")
    table.add_column("Days before", justify="right")
    table.add_column("Reminder")
    table.add_column("Note")

    for planned in plan_advance_reminders(due, days, jurisdiction, oracle):
        note = ""
        if planned.shifted:
            note = f"moved from {format_date(planned.original_date)}"
            holiday = oracle.holiday_name(planned.original_date, jurisdiction)
            if holiday:
                note += f" ({holiday})"
        table.add_row(str(planned.days_before), format_date(planned.date), note)

    if start is not None:
        halfway = half_period_reminder(start.date(), due, jurisdiction, oracle)
        if halfway is not None:
            table.add_row(str((due - halfway).days), format_date(halfway), "half-way")

    console.print(table)


@main.command()
@click.argument("user_id")
@click.option("--substitute-id", default=None, help="User who takes over")
@click.option(
    "--from",
    "away_from",
    type=click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%d %H:%M"]),
    default=None,
    help="Start of the away period (local time)",
)
@click.option(
    "--until",
    "away_until",
    type=click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%d %H:%M"]),
    default=None,
    help="End of the away period (local time)",
)
@click.option(
    "--activate/--deactivate",
    default=None,
    help="Switch the away state on or off",
)
def substitute(
    user_id: str,
    substitute_id: Optional[str],
    away_from: Optional[datetime],
    away_until: Optional[datetime],
    activate: Optional[bool],
) -> None:
    """Assign a substitute and away period to a user."""
    setup_logging(settings.log_level)
    clock = SystemClock(settings.timezone)
    repository = DeadlineRepository(_open_database())

    kwargs = {}
    if substitute_id is not None:
        kwargs["substitute_id"] = substitute_id
    if away_from is not None:
        kwargs["away_from"] = _localize(clock, away_from)
    if away_until is not None:
        kwargs["away_until"] = _localize(clock, away_until)

    try:
        user = repository.assign_substitute(
            user_id, clock.now(), activate=activate, **kwargs
        )
    except SubstitutionError as e:
        console.print(f"[red]❌ Substitution rejected:[/red] {e}")
        sys.exit(1)

    state = "away" if user.away else "present"
    console.print(
        f"[green]✅ {user.name} ({user.id}) is {state}; "
        f"substitute: {user.substitute_id or '-'}[/green]"
    )


@main.command()
def status() -> None:
    """Show the most recent sweep run."""
    run = _open_database().get_last_sweep_run()
    if run is None:
        console.print("[yellow]No sweep has run yet[/yellow]")
        return

    table = Table(title="Last deadline sweep")
    table.add_column("Field")
    table.add_column("Value")
    for key in (
        "started_at",
        "finished_at",
        "expired_substitutions",
        "reminders_sent",
        "escalations_sent",
        "failures",
    ):
        value = run[key]
        if isinstance(value, datetime):
            value = value.isoformat(timespec="seconds")
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)


if __name__ == "__main__":
    main()

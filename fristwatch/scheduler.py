"""Daily sweep scheduling with APScheduler.

The job runs with ``max_instances=1`` so at most one sweep is in flight;
the deduplication gate relies on that.
"""

import logging
from typing import Optional

from apscheduler.schedulers.blocking import BlockingScheduler

from .config import Settings, settings
from .sweep import run_deadline_sweep

logger = logging.getLogger(__name__)

JOB_ID = "deadline_sweep"


def create_scheduler(app_settings: Optional[Settings] = None) -> BlockingScheduler:
    """Build a scheduler with the daily sweep job registered."""
    app_settings = app_settings or settings

    scheduler = BlockingScheduler(timezone=app_settings.timezone)
    scheduler.add_job(
        run_scheduled_sweep,
        trigger="cron",
        hour=app_settings.sweep_hour,
        minute=app_settings.sweep_minute,
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,  # Prevent overlapping sweeps
        coalesce=True,  # Merge missed runs if the process was down
        kwargs={"app_settings": app_settings},
    )
    return scheduler


def run_scheduled_sweep(app_settings: Optional[Settings] = None) -> None:
    """Job wrapper; keeps business logic out of the scheduler."""
    try:
        result = run_deadline_sweep(app_settings)
    except Exception:
        # Keep the scheduler alive; the next run's catch-up covers the gap
        logger.exception("Scheduled deadline sweep failed")
        return

    logger.info(f"Scheduled deadline sweep finished: {result.to_dict()}")


def start_scheduler(app_settings: Optional[Settings] = None) -> None:
    """Run the blocking scheduler until interrupted."""
    app_settings = app_settings or settings
    scheduler = create_scheduler(app_settings)

    logger.info(
        f"Deadline sweep scheduled daily at {app_settings.sweep_hour:02d}:"
        f"{app_settings.sweep_minute:02d} ({app_settings.timezone})"
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")

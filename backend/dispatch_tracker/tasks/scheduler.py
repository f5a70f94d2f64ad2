"""Background task scheduler for feed polling and weekly reports."""

import logging
from datetime import UTC, datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from dispatch_tracker.config import get_settings
from dispatch_tracker.database import async_session_maker
from dispatch_tracker.services.clock import local_zone
from dispatch_tracker.services.differ import Snapshot
from dispatch_tracker.services.feed_client import DispatchFeedClient
from dispatch_tracker.services.monitor import DispatchMonitor
from dispatch_tracker.services.publisher import build_publisher
from dispatch_tracker.services.reports import ReportService

logger = logging.getLogger(__name__)
settings = get_settings()

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None

# Publishers keep the id of the message they edit in place.
status_publisher = build_publisher(
    settings.status_webhook_url, settings.status_message_id, name="status"
)
report_publisher = build_publisher(
    settings.report_webhook_url, settings.report_message_id, name="report"
)

# Snapshot carried from one successful cycle to the next; None reloads from the DB.
last_snapshot: Snapshot | None = None


async def poll_dispatch_job() -> None:
    """Background job: one poll cycle of the active dispatch feed."""
    global last_snapshot

    logger.info("Starting scheduled dispatch poll")
    try:
        async with async_session_maker() as db:
            monitor = DispatchMonitor(db, DispatchFeedClient(), status_publisher, settings)
            result, last_snapshot = await monitor.run_cycle(previous=last_snapshot)
            logger.info(
                f"Dispatch poll complete: {result.total} active, "
                f"{len(result.new)} new, {len(result.cleared)} cleared"
            )
    except Exception as e:
        # Reload from the database next cycle.
        last_snapshot = None
        logger.error(f"Dispatch poll failed: {e}", exc_info=True)


async def weekly_report_job() -> None:
    """Background job: generate, archive and publish the weekly report."""
    logger.info("Starting scheduled weekly report")
    try:
        async with async_session_maker() as db:
            report = await ReportService(db, settings).generate()
            await report_publisher.publish(report.report_text)
            logger.info(f"Weekly report published for {report.period_start}")
    except Exception as e:
        logger.error(f"Weekly report failed: {e}", exc_info=True)


def setup_scheduler() -> AsyncIOScheduler:
    """Set up and start the background task scheduler."""
    global scheduler

    scheduler = AsyncIOScheduler()

    # One poll at a time; a slow cycle delays the next tick instead of overlapping.
    scheduler.add_job(
        poll_dispatch_job,
        trigger=IntervalTrigger(seconds=settings.poll_interval_seconds),
        next_run_time=datetime.now(UTC),
        id="poll_dispatch",
        name="Poll active dispatch feed",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )

    scheduler.add_job(
        weekly_report_job,
        trigger=CronTrigger(
            day_of_week=settings.report_day_of_week,
            hour=settings.report_hour,
            timezone=local_zone(settings.local_timezone),
        ),
        id="weekly_report",
        name="Generate weekly dispatch report",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started")

    return scheduler


def shutdown_scheduler() -> None:
    """Shut down the scheduler gracefully."""
    global scheduler

    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
        scheduler = None

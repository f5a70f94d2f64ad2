"""Weekly report generation and archiving."""

import json
import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_tracker.config import Settings, get_settings
from dispatch_tracker.database import dialect_insert
from dispatch_tracker.models import WeeklyReport
from dispatch_tracker.services.aggregator import Aggregator
from dispatch_tracker.services.clock import local_zone, to_local, utcnow
from dispatch_tracker.services.formatting import format_weekly_report

logger = logging.getLogger(__name__)


class ReportService:
    """
    Builds the periodic report from aggregator queries and archives it.

    Reports are keyed by the local date the period starts on, so re-running
    a period replaces its archived row.
    """

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.aggregator = Aggregator(db)

    async def generate(self, days: int | None = None, now: datetime | None = None) -> WeeklyReport:
        """
        Generate, archive and return the report for the trailing `days`.

        Args:
            days: Window length (default settings.report_days)
            now: End of the window (default current time)
        """
        days = days or self.settings.report_days
        now = now or utcnow()
        tz = local_zone(self.settings.local_timezone)
        period_start = to_local(now - timedelta(days=days), tz).date()
        period_end = to_local(now, tz).date()

        logger.info(f"Generating report for {period_start} .. {period_end}")

        overview = await self.aggregator.overview(days=days, now=now)
        top_types, noise_count = await self.aggregator.top_types(
            days=days, limit=5, noise_types=self.settings.noise_types, now=now
        )
        hotspots = await self.aggregator.hotspot_streets(days=days, limit=5, now=now)
        peak_hours = await self.aggregator.peak_violent_hours(days=days, limit=5, now=now)
        cities = await self.aggregator.city_breakdown(days=days, limit=10, now=now)

        report_text = format_weekly_report(
            period_start=period_start,
            period_end=period_end,
            overview=overview,
            top_types=top_types,
            noise_count=noise_count,
            hotspots=hotspots,
            peak_hours=peak_hours,
            cities=cities[:5],
            generated_at=now,
            settings=self.settings,
        )

        values = {
            "period_start": period_start,
            "period_end": period_end,
            "report_text": report_text,
            "total_incidents": overview.total,
            "violent_incidents": overview.violent,
            "top_streets": json.dumps([h.model_dump() for h in hotspots]),
            "peak_hours": json.dumps([h.model_dump() for h in peak_hours]),
            "created_at": now,
        }
        stmt = dialect_insert(self.db, WeeklyReport).values(**values).on_conflict_do_update(
            index_elements=["period_start"],
            set_={k: v for k, v in values.items() if k != "period_start"},
        )
        await self.db.execute(stmt)
        await self.db.commit()

        report = await self.get_by_period(period_start)
        logger.info(
            f"Archived report {period_start}: {overview.total} incidents, "
            f"{overview.violent} violent"
        )
        return report

    async def get_by_period(self, period_start) -> WeeklyReport:
        result = await self.db.execute(
            select(WeeklyReport)
            .where(WeeklyReport.period_start == period_start)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def latest(self) -> WeeklyReport | None:
        result = await self.db.execute(
            select(WeeklyReport).order_by(WeeklyReport.period_start.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def list_reports(self, limit: int = 12) -> list[WeeklyReport]:
        result = await self.db.execute(
            select(WeeklyReport).order_by(WeeklyReport.period_start.desc()).limit(limit)
        )
        return list(result.scalars().all())

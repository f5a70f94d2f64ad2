"""Trailing-window aggregate queries over the incident store."""

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timedelta

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_tracker.models import Incident
from dispatch_tracker.schemas.stats import (
    CityStat,
    DailyStat,
    Hotspot,
    HourCount,
    HourlyStat,
    Overview,
    TypeStat,
    ViolentHourStat,
)
from dispatch_tracker.services.classifier import violent_clause
from dispatch_tracker.services.clock import as_utc, utcnow

logger = logging.getLogger(__name__)

MAX_DAILY_ROWS = 30


def _violent_count():
    return func.coalesce(
        func.sum(case((violent_clause(Incident.type_name), 1), else_=0)), 0
    )


class Aggregator:
    """
    Read-only statistics over stored occurrences.

    Every window slides from `now` at query time rather than calendar
    boundaries; only daily_stats groups by local calendar date.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _since(now: datetime | None, *, hours: float = 0, days: float = 0) -> datetime:
        return (now or utcnow()) - timedelta(hours=hours, days=days)

    async def _average_durations(
        self, since: datetime, type_names: Iterable[str]
    ) -> dict[str, float]:
        """Mean clear time in minutes per type; active rows are excluded."""
        type_names = list(type_names)
        if not type_names:
            return {}

        result = await self.db.execute(
            select(Incident.type_name, Incident.received_at, Incident.cleared_at).where(
                Incident.received_at > since,
                Incident.cleared.is_(True),
                Incident.cleared_at.is_not(None),
                Incident.type_name.in_(type_names),
            )
        )

        durations: dict[str, list[float]] = defaultdict(list)
        for row in result.all():
            minutes = (as_utc(row.cleared_at) - as_utc(row.received_at)).total_seconds() / 60
            durations[row.type_name].append(minutes)

        return {name: sum(values) / len(values) for name, values in durations.items()}

    async def type_stats(
        self, hours: float = 24, limit: int | None = 20, now: datetime | None = None
    ) -> list[TypeStat]:
        """Count and average clear duration per type, top-N by count."""
        since = self._since(now, hours=hours)
        count = func.count(Incident.id).label("incident_count")

        query = (
            select(Incident.type_name, count)
            .where(Incident.received_at > since)
            .group_by(Incident.type_name)
            .order_by(count.desc(), Incident.type_name)
        )
        if limit is not None:
            query = query.limit(limit)

        rows = (await self.db.execute(query)).all()
        averages = await self._average_durations(since, (row.type_name for row in rows))

        return [
            TypeStat(
                type_name=row.type_name,
                count=row.incident_count,
                avg_duration_min=averages.get(row.type_name),
            )
            for row in rows
        ]

    async def top_types(
        self,
        days: float = 7,
        limit: int = 5,
        noise_types: Iterable[str] = (),
        now: datetime | None = None,
    ) -> tuple[list[TypeStat], int]:
        """
        Type ranking with noise types (storms, utility hazards) set aside.

        Returns:
            Tuple of (top non-noise types, combined count of noise types)
        """
        noise = {name.upper() for name in noise_types}
        stats = await self.type_stats(hours=days * 24, limit=None, now=now)

        noise_count = sum(stat.count for stat in stats if stat.type_name.upper() in noise)
        ranked = [stat for stat in stats if stat.type_name.upper() not in noise]
        return ranked[:limit], noise_count

    async def daily_stats(self, days: float = 30, now: datetime | None = None) -> list[DailyStat]:
        """Totals and violent counts per local calendar date, newest first."""
        since = self._since(now, days=days)
        total = func.count(Incident.id).label("total")
        violent = _violent_count().label("violent")

        result = await self.db.execute(
            select(Incident.call_date, total, violent)
            .where(Incident.received_at > since, Incident.call_date.is_not(None))
            .group_by(Incident.call_date)
            .order_by(Incident.call_date.desc())
            .limit(MAX_DAILY_ROWS)
        )
        return [
            DailyStat(day=row.call_date, total=row.total, violent=row.violent)
            for row in result.all()
        ]

    async def hourly_stats(self, days: float = 30, now: datetime | None = None) -> list[HourlyStat]:
        """Totals and violent counts per hour of day (0-23), ascending."""
        since = self._since(now, days=days)
        total = func.count(Incident.id).label("total")
        violent = _violent_count().label("violent")

        result = await self.db.execute(
            select(Incident.hour_bucket, total, violent)
            .where(Incident.received_at > since, Incident.hour_bucket.is_not(None))
            .group_by(Incident.hour_bucket)
            .order_by(Incident.hour_bucket)
        )
        return [
            HourlyStat(hour=row.hour_bucket, total=row.total, violent=row.violent)
            for row in result.all()
        ]

    async def hotspot_streets(
        self, days: float = 30, limit: int = 20, now: datetime | None = None
    ) -> list[Hotspot]:
        """Street/city pairs ranked by violent occurrences."""
        since = self._since(now, days=days)
        count = func.count(Incident.id).label("incident_count")

        result = await self.db.execute(
            select(Incident.street, Incident.city, count)
            .where(
                Incident.received_at > since,
                Incident.street.is_not(None),
                violent_clause(Incident.type_name),
            )
            .group_by(Incident.street, Incident.city)
            .order_by(count.desc(), Incident.street)
            .limit(limit)
        )
        return [
            Hotspot(street=row.street, city=row.city, count=row.incident_count)
            for row in result.all()
        ]

    async def violent_by_hour(
        self, days: float = 30, now: datetime | None = None
    ) -> list[ViolentHourStat]:
        """Violent occurrences per (hour, type), by hour then count."""
        since = self._since(now, days=days)
        count = func.count(Incident.id).label("incident_count")

        result = await self.db.execute(
            select(Incident.hour_bucket, Incident.type_name, count)
            .where(
                Incident.received_at > since,
                Incident.hour_bucket.is_not(None),
                violent_clause(Incident.type_name),
            )
            .group_by(Incident.hour_bucket, Incident.type_name)
            .order_by(Incident.hour_bucket, count.desc(), Incident.type_name)
        )
        return [
            ViolentHourStat(hour=row.hour_bucket, type_name=row.type_name, count=row.incident_count)
            for row in result.all()
        ]

    async def peak_violent_hours(
        self, days: float = 7, limit: int = 5, now: datetime | None = None
    ) -> list[HourCount]:
        """Hours of day with the most violent occurrences."""
        since = self._since(now, days=days)
        count = func.count(Incident.id).label("incident_count")

        result = await self.db.execute(
            select(Incident.hour_bucket, count)
            .where(
                Incident.received_at > since,
                Incident.hour_bucket.is_not(None),
                violent_clause(Incident.type_name),
            )
            .group_by(Incident.hour_bucket)
            .order_by(count.desc(), Incident.hour_bucket)
            .limit(limit)
        )
        return [HourCount(hour=row.hour_bucket, count=row.incident_count) for row in result.all()]

    async def city_breakdown(
        self, days: float = 7, limit: int = 10, now: datetime | None = None
    ) -> list[CityStat]:
        """Cities ordered by violent count, then total."""
        since = self._since(now, days=days)
        total = func.count(Incident.id).label("total")
        violent = _violent_count().label("violent")

        result = await self.db.execute(
            select(Incident.city, total, violent)
            .where(
                Incident.received_at > since,
                Incident.city.is_not(None),
                Incident.city != "",
            )
            .group_by(Incident.city)
            .order_by(violent.desc(), total.desc(), Incident.city)
            .limit(limit)
        )
        return [
            CityStat(city=row.city, total=row.total, violent=row.violent)
            for row in result.all()
        ]

    async def overview(self, days: float = 7, now: datetime | None = None) -> Overview:
        """Window totals with a violent share that is 0.0 when nothing was recorded."""
        since = self._since(now, days=days)

        result = await self.db.execute(
            select(func.count(Incident.id), _violent_count()).where(Incident.received_at > since)
        )
        total, violent = result.one()
        total = total or 0
        violent = violent or 0

        violent_pct = round(violent / total * 100, 1) if total else 0.0
        return Overview(total=total, violent=violent, violent_pct=violent_pct)

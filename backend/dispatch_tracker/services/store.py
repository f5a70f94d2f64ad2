"""Durable incident store: one row per (incident_id, received_at) occurrence."""

import logging
import re
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_tracker.database import dialect_insert
from dispatch_tracker.models import Incident
from dispatch_tracker.schemas.incident import FeedIncident
from dispatch_tracker.services.clock import as_utc, local_zone, to_local, utcnow

logger = logging.getLogger(__name__)

# "2600 8TH AVE S", "100-199 BROADWAY"; the number must be its own token.
HOUSE_NUMBER = re.compile(r"^\d+(?:-\d+)?\s+")
INTERSECTION_SEPARATOR = "/"


def extract_street(location: str | None) -> str | None:
    """
    Street token used for hotspot grouping.

    Drops a leading house number; for "A / B" intersections keeps only A.
    """
    if not location:
        return None
    if INTERSECTION_SEPARATOR in location:
        location = location.split(INTERSECTION_SEPARATOR, 1)[0]
    street = HOUSE_NUMBER.sub("", location.strip()).strip()
    return street or None


def derive_fields(
    location: str | None, received_at: datetime, tz: ZoneInfo | None = None
) -> dict[str, Any]:
    """Derived grouping columns for an occurrence."""
    local = to_local(received_at, tz)
    return {
        "street": extract_street(location),
        "hour_bucket": local.hour,
        "call_date": local.date(),
    }


class IncidentStore:
    """
    Append/update-only lifecycle store.

    Assumes a single writer (one poll cycle at a time). Readers may observe
    a row between its insert and its last_seen_at bump.
    """

    def __init__(self, db: AsyncSession, tz: ZoneInfo | None = None):
        self.db = db
        self.tz = tz or local_zone()

    async def record_occurrence(self, incident: FeedIncident, now: datetime | None = None) -> None:
        """
        Insert the occurrence if unseen, then advance last_seen_at.

        The bump only applies to uncleared rows, so a cleared occurrence keeps
        the last_seen_at of the final poll that actually reported it.
        """
        now = now or utcnow()

        values = {
            "incident_id": incident.incident_id,
            "type_code": incident.type_code,
            "type_name": incident.type_name,
            "location": incident.location,
            "location_description": incident.location_description,
            "city": incident.city,
            "received_at": incident.received_at,
            "first_seen_at": now,
            "last_seen_at": now,
            "cleared": False,
            **derive_fields(incident.location, incident.received_at, self.tz),
        }

        stmt = dialect_insert(self.db, Incident).values(**values).on_conflict_do_nothing(
            index_elements=["incident_id", "received_at"],
        )
        await self.db.execute(stmt)

        await self.db.execute(
            update(Incident)
            .where(
                Incident.incident_id == incident.incident_id,
                Incident.received_at == incident.received_at,
                Incident.cleared.is_(False),
            )
            .values(last_seen_at=now)
            .execution_options(synchronize_session=False)
        )

    async def record_snapshot(
        self, incidents: Sequence[FeedIncident], now: datetime | None = None
    ) -> tuple[int, int]:
        """
        Record every occurrence of a poll, each in its own transaction.

        Returns:
            Tuple of (records written, records that failed)
        """
        now = now or utcnow()
        recorded = 0
        failed = 0

        for incident in incidents:
            try:
                await self.record_occurrence(incident, now=now)
                await self.db.commit()
                recorded += 1
            except (SQLAlchemyError, ValueError) as e:
                await self.db.rollback()
                failed += 1
                logger.error(
                    f"Failed to record incident {incident.incident_id} "
                    f"({incident.received_at.isoformat()}): {e}"
                )

        if failed:
            logger.warning(f"Recorded {recorded} incidents, {failed} failed")
        return recorded, failed

    async def mark_cleared(self, ids: Iterable[str], now: datetime | None = None) -> int:
        """
        Mark the still-active occurrences of these ids as cleared.

        Already-cleared rows are untouched. Returns the number of rows cleared.
        """
        ids = list(dict.fromkeys(ids))
        if not ids:
            return 0
        now = now or utcnow()

        result = await self.db.execute(
            update(Incident)
            .where(Incident.incident_id.in_(ids), Incident.cleared.is_(False))
            .values(cleared=True, cleared_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        if result.rowcount:
            logger.info(f"Marked {result.rowcount} incidents cleared")
        return result.rowcount

    async def clear_superseded(
        self, incidents: Sequence[FeedIncident], now: datetime | None = None
    ) -> int:
        """
        Clear older active occurrences of ids the feed has recycled.

        An id reported with a new received_at is a different occurrence; the
        previous one is no longer active.
        """
        current = {incident.incident_id: incident.received_at for incident in incidents}
        if not current:
            return 0
        now = now or utcnow()

        result = await self.db.execute(
            select(Incident.id, Incident.incident_id, Incident.received_at).where(
                Incident.cleared.is_(False),
                Incident.incident_id.in_(list(current)),
            )
        )
        stale = [
            row.id
            for row in result.all()
            if as_utc(row.received_at) != as_utc(current[row.incident_id])
        ]
        if not stale:
            return 0

        await self.db.execute(
            update(Incident)
            .where(Incident.id.in_(stale), Incident.cleared.is_(False))
            .values(cleared=True, cleared_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        logger.info(f"Cleared {len(stale)} occurrences superseded by recycled ids")
        return len(stale)

    async def query_active(self) -> list[Incident]:
        """All uncleared occurrences, most recently received first."""
        result = await self.db.execute(
            select(Incident)
            .where(Incident.cleared.is_(False))
            .order_by(Incident.received_at.desc(), Incident.id.desc())
        )
        return list(result.scalars().all())

    async def query_recent(
        self, window_hours: int = 24, limit: int = 100, now: datetime | None = None
    ) -> list[Incident]:
        """Occurrences received inside the trailing window, newest first."""
        since = (now or utcnow()) - timedelta(hours=window_hours)
        result = await self.db.execute(
            select(Incident)
            .where(Incident.received_at > since)
            .order_by(Incident.received_at.desc(), Incident.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def total_count(self) -> int:
        result = await self.db.execute(select(func.count(Incident.id)))
        return result.scalar() or 0

    async def active_count(self) -> int:
        result = await self.db.execute(
            select(func.count(Incident.id)).where(Incident.cleared.is_(False))
        )
        return result.scalar() or 0

    async def backfill_derived_fields(self, batch_size: int = 500) -> int:
        """
        Fill street/hour_bucket/call_date on rows written before they existed.

        Idempotent compute-if-null step keyed on hour_bucket/call_date; street
        is filled alongside, since some locations legitimately have none.
        Never touches the steady-state write path.

        Returns:
            Number of rows updated
        """
        query = select(Incident.id, Incident.location, Incident.received_at).where(
            or_(Incident.hour_bucket.is_(None), Incident.call_date.is_(None))
        )
        result = await self.db.execute(query)
        rows = result.all()

        updated = 0
        for i in range(0, len(rows), batch_size):
            batch = rows[i:i + batch_size]
            for row in batch:
                await self.db.execute(
                    update(Incident)
                    .where(Incident.id == row.id)
                    .values(**derive_fields(row.location, row.received_at, self.tz))
                    .execution_options(synchronize_session=False)
                )
                updated += 1
            await self.db.commit()

        if updated:
            logger.info(f"Backfilled derived fields for {updated} incidents")
        return updated

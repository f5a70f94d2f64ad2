"""Health and ingestion status endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_tracker.database import get_db
from dispatch_tracker.models import Incident, SnapshotState, WeeklyReport
from dispatch_tracker.services.snapshots import DEFAULT_SOURCE
from dispatch_tracker.services.store import IncidentStore

router = APIRouter(tags=["health"])


class FeedStatus(BaseModel):
    """Status of the polled feed and the incident store."""

    last_poll: datetime | None
    polled_active: int
    recorded_total: int
    recorded_active: int
    oldest_record: datetime | None = None
    newest_record: datetime | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    feed: FeedStatus
    reports_archived: int


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthResponse:
    """
    Health check endpoint with ingestion status.

    Returns the last poll time and record counts.
    """
    state_result = await db.execute(
        select(SnapshotState).where(SnapshotState.source == DEFAULT_SOURCE)
    )
    state = state_result.scalar_one_or_none()

    store = IncidentStore(db)
    total = await store.total_count()
    active = await store.active_count()

    range_result = await db.execute(
        select(func.min(Incident.received_at), func.max(Incident.received_at))
    )
    oldest, newest = range_result.one()

    reports_result = await db.execute(select(func.count(WeeklyReport.id)))

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        feed=FeedStatus(
            last_poll=state.last_update_at if state else None,
            polled_active=state.record_count if state else 0,
            recorded_total=total,
            recorded_active=active,
            oldest_record=oldest,
            newest_record=newest,
        ),
        reports_archived=reports_result.scalar() or 0,
    )


@router.get("/ready")
async def readiness_check() -> dict:
    """Simple readiness probe for container orchestration."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict:
    """Simple liveness probe for container orchestration."""
    return {"status": "alive"}

"""API routes for windowed aggregate statistics."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_tracker.database import get_db
from dispatch_tracker.schemas.stats import (
    DailyStatsResponse,
    HotspotsResponse,
    HourlyStatsResponse,
    TypeStatsResponse,
    ViolentByHourResponse,
)
from dispatch_tracker.services.aggregator import Aggregator
from dispatch_tracker.services.store import IncidentStore

router = APIRouter(prefix="/stats", tags=["stats"])

Days = Annotated[int, Query(ge=1, le=365, description="Trailing window in days")]


@router.get("/types", response_model=TypeStatsResponse)
async def type_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    hours: int = Query(24, ge=1, le=24 * 365, description="Trailing window in hours"),
    limit: int = Query(20, ge=1, le=100),
) -> TypeStatsResponse:
    """Top incident types with average time to clear."""
    types = await Aggregator(db).type_stats(hours=hours, limit=limit)
    total = await IncidentStore(db).total_count()
    return TypeStatsResponse(hours=hours, total_recorded=total, types=types)


@router.get("/daily", response_model=DailyStatsResponse)
async def daily_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    days: Days = 30,
) -> DailyStatsResponse:
    """Per-day totals and violent counts, most recent first."""
    daily = await Aggregator(db).daily_stats(days=days)
    return DailyStatsResponse(days=days, daily=daily)


@router.get("/hourly", response_model=HourlyStatsResponse)
async def hourly_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    days: Days = 30,
) -> HourlyStatsResponse:
    """Hour-of-day distribution of all and violent incidents."""
    hourly = await Aggregator(db).hourly_stats(days=days)
    return HourlyStatsResponse(days=days, hourly=hourly)


@router.get("/hotspots", response_model=HotspotsResponse)
async def hotspots(
    db: Annotated[AsyncSession, Depends(get_db)],
    days: Days = 30,
    limit: int = Query(20, ge=1, le=100),
) -> HotspotsResponse:
    """Streets with the most violent-classified incidents."""
    rows = await Aggregator(db).hotspot_streets(days=days, limit=limit)
    return HotspotsResponse(days=days, hotspots=rows)


@router.get("/violent-by-hour", response_model=ViolentByHourResponse)
async def violent_by_hour(
    db: Annotated[AsyncSession, Depends(get_db)],
    days: Days = 30,
) -> ViolentByHourResponse:
    """Violent incidents per hour and type, for peak-time analysis."""
    rows = await Aggregator(db).violent_by_hour(days=days)
    return ViolentByHourResponse(days=days, rows=rows)

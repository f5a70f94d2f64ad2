"""API routes for stored incident occurrences."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_tracker.database import get_db
from dispatch_tracker.schemas.incident import IncidentOut, IncidentsResponse
from dispatch_tracker.services.store import IncidentStore

router = APIRouter(prefix="/incidents", tags=["incidents"])


@router.get("/active", response_model=IncidentsResponse)
async def list_active(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> IncidentsResponse:
    """All occurrences not yet cleared, most recently received first."""
    incidents = await IncidentStore(db).query_active()
    return IncidentsResponse(
        incidents=[IncidentOut.model_validate(incident) for incident in incidents],
        total=len(incidents),
    )


@router.get("/recent", response_model=IncidentsResponse)
async def list_recent(
    db: Annotated[AsyncSession, Depends(get_db)],
    hours: int = Query(24, ge=1, le=24 * 90, description="Trailing window in hours"),
    limit: int = Query(100, ge=1, le=1000),
) -> IncidentsResponse:
    """Occurrences received within the trailing window, newest first."""
    incidents = await IncidentStore(db).query_recent(window_hours=hours, limit=limit)
    return IncidentsResponse(
        incidents=[IncidentOut.model_validate(incident) for incident in incidents],
        total=len(incidents),
    )

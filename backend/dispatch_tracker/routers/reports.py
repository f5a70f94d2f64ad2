"""API routes for archived weekly reports."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_tracker.database import get_db
from dispatch_tracker.schemas.report import WeeklyReportOut, WeeklyReportsResponse
from dispatch_tracker.services.reports import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=WeeklyReportsResponse)
async def list_reports(
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(12, ge=1, le=104),
) -> WeeklyReportsResponse:
    """Archived reports, newest period first."""
    reports = await ReportService(db).list_reports(limit=limit)
    return WeeklyReportsResponse(
        reports=[WeeklyReportOut.model_validate(report) for report in reports]
    )


@router.get("/latest", response_model=WeeklyReportOut)
async def latest_report(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WeeklyReportOut:
    """Most recent archived report."""
    report = await ReportService(db).latest()
    if report is None:
        raise HTTPException(status_code=404, detail="No reports archived yet")
    return WeeklyReportOut.model_validate(report)


@router.post("/generate", response_model=WeeklyReportOut)
async def generate_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    days: int = Query(7, ge=1, le=90, description="Trailing window in days"),
) -> WeeklyReportOut:
    """
    Generate and archive a report for the trailing window now.

    Re-running within the same period overwrites that period's report.
    """
    report = await ReportService(db).generate(days=days)
    return WeeklyReportOut.model_validate(report)

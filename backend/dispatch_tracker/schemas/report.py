"""Pydantic schemas for archived reports."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class WeeklyReportOut(BaseModel):
    """Archived report response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    period_start: date
    period_end: date
    report_text: str
    total_incidents: int
    violent_incidents: int
    top_streets: str | None = None
    peak_hours: str | None = None
    created_at: datetime


class WeeklyReportsResponse(BaseModel):
    reports: list[WeeklyReportOut]

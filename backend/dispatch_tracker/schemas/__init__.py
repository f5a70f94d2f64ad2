"""Pydantic schemas for feed records and API responses."""

from dispatch_tracker.schemas.incident import FeedIncident, IncidentOut, IncidentsResponse
from dispatch_tracker.schemas.report import WeeklyReportOut, WeeklyReportsResponse

__all__ = [
    "FeedIncident",
    "IncidentOut",
    "IncidentsResponse",
    "WeeklyReportOut",
    "WeeklyReportsResponse",
]

"""Pydantic schemas for dispatch incidents."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class FeedIncident(BaseModel):
    """One active incident as reported by a single feed poll."""

    model_config = ConfigDict(frozen=True)

    incident_id: str
    type_code: str | None = None
    type_name: str
    location: str | None = None
    location_description: str | None = None
    city: str | None = None
    received_at: datetime


class IncidentOut(BaseModel):
    """Stored incident response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    incident_id: str
    type_code: str | None = None
    type_name: str
    location: str | None = None
    location_description: str | None = None
    city: str | None = None
    received_at: datetime

    first_seen_at: datetime
    last_seen_at: datetime
    cleared: bool
    cleared_at: datetime | None = None

    street: str | None = None
    hour_bucket: int | None = None
    call_date: date | None = None


class IncidentsResponse(BaseModel):
    """List response for stored incidents."""

    incidents: list[IncidentOut]
    total: int

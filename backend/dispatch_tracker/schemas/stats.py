"""Pydantic schemas for aggregate statistics."""

from datetime import date

from pydantic import BaseModel, Field


class TypeStat(BaseModel):
    """Count and mean clear time for one incident type."""

    type_name: str
    count: int
    avg_duration_min: float | None = None


class DailyStat(BaseModel):
    day: date
    total: int
    violent: int


class HourlyStat(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    total: int
    violent: int


class HourCount(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    count: int


class Hotspot(BaseModel):
    """Violent-incident count for one street/city pair."""

    street: str
    city: str | None = None
    count: int


class ViolentHourStat(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    type_name: str
    count: int


class CityStat(BaseModel):
    city: str
    total: int
    violent: int


class Overview(BaseModel):
    """Window totals; violent_pct is 0.0 for an empty window."""

    total: int
    violent: int
    violent_pct: float


class TypeStatsResponse(BaseModel):
    hours: int
    total_recorded: int
    types: list[TypeStat]


class DailyStatsResponse(BaseModel):
    days: int
    daily: list[DailyStat]


class HourlyStatsResponse(BaseModel):
    days: int
    hourly: list[HourlyStat]


class HotspotsResponse(BaseModel):
    days: int
    hotspots: list[Hotspot]


class ViolentByHourResponse(BaseModel):
    days: int
    rows: list[ViolentHourStat]

"""Wall-clock helpers: UTC for storage, one fixed local zone for bucketing."""

from datetime import UTC, datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

from dispatch_tracker.config import get_settings


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite round-trips) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@lru_cache
def local_zone(name: str | None = None) -> ZoneInfo:
    """Zone used for every hour/date derivation and display."""
    return ZoneInfo(name or get_settings().local_timezone)


def to_local(value: datetime, tz: ZoneInfo | None = None) -> datetime:
    return as_utc(value).astimezone(tz or local_zone())

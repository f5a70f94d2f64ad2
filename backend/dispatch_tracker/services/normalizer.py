"""Normalize raw ArcGIS feed payloads into FeedIncident records."""

import logging
from datetime import UTC, datetime
from typing import Any

from dispatch_tracker.schemas.incident import FeedIncident

logger = logging.getLogger(__name__)


class FeedParseError(Exception):
    """Raised when a feed payload is not well-formed structured data."""

    pass


def _clean_text(value: Any) -> str | None:
    """Collapse blank or missing text fields to None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_received_time(value: Any) -> datetime | None:
    """
    Parse CallReceivedTime into an aware UTC datetime.

    ArcGIS date fields are epoch milliseconds; ISO 8601 strings are accepted too.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value / 1000, tz=UTC)

    text = str(value).strip()
    if not text:
        return None
    if text.isdigit():
        return datetime.fromtimestamp(int(text) / 1000, tz=UTC)

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    # Naive ISO strings are UTC; offsets and "Z" are honored.
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def normalize_attributes(attributes: dict[str, Any]) -> FeedIncident | None:
    """Convert one feature's attributes; None if required fields are missing."""
    incident_id = _clean_text(attributes.get("ObjectId"))
    if incident_id is None:
        return None

    received_at = parse_received_time(attributes.get("CallReceivedTime"))
    if received_at is None:
        return None

    return FeedIncident(
        incident_id=incident_id,
        type_code=_clean_text(attributes.get("IncidentTypeCode")),
        type_name=_clean_text(attributes.get("IncidentTypeName")) or "UNKNOWN",
        location=_clean_text(attributes.get("Location")),
        location_description=_clean_text(attributes.get("LocationDescription")),
        city=_clean_text(attributes.get("CityName")),
        received_at=received_at,
    )


def normalize_feed(payload: Any) -> list[FeedIncident]:
    """
    Convert a raw feed response into incidents, preserving arrival order.

    Raises:
        FeedParseError: payload is not a feature collection
    """
    if not isinstance(payload, dict):
        raise FeedParseError(f"Expected JSON object, got {type(payload).__name__}")

    if "error" in payload:
        error = payload["error"]
        message = error.get("message") if isinstance(error, dict) else error
        raise FeedParseError(f"Feed returned an error: {message}")

    features = payload.get("features")
    if not isinstance(features, list):
        raise FeedParseError("Feed payload has no 'features' list")

    incidents: list[FeedIncident] = []
    for index, feature in enumerate(features):
        if not isinstance(feature, dict) or not isinstance(feature.get("attributes"), dict):
            raise FeedParseError(f"Feature {index} has no attributes object")

        incident = normalize_attributes(feature["attributes"])
        if incident is None:
            logger.warning(f"Skipping feature {index}: missing ObjectId or CallReceivedTime")
            continue
        incidents.append(incident)

    return incidents

"""Tests for feed normalization."""

from datetime import UTC, datetime

import pytest

from dispatch_tracker.services.normalizer import (
    FeedParseError,
    normalize_attributes,
    normalize_feed,
    parse_received_time,
)


class TestParseReceivedTime:
    """Tests for CallReceivedTime parsing."""

    def test_epoch_milliseconds(self):
        """Test ArcGIS epoch-millisecond timestamps."""
        result = parse_received_time(1705595400000)
        assert result == datetime(2024, 1, 18, 16, 30, tzinfo=UTC)

    def test_epoch_milliseconds_as_string(self):
        result = parse_received_time("1705595400000")
        assert result == datetime(2024, 1, 18, 16, 30, tzinfo=UTC)

    def test_iso_formats(self):
        """Test ISO strings are accepted and treated as UTC."""
        for value in [
            "2024-01-18T16:30:00.000",
            "2024-01-18T16:30:00",
            "2024-01-18 16:30:00",
        ]:
            result = parse_received_time(value)
            assert result is not None
            assert result.tzinfo is not None
            assert result.hour == 16

    def test_iso_with_offset(self):
        """Test "Z" and explicit offsets are converted to UTC."""
        expected = datetime(2024, 1, 18, 20, 15, tzinfo=UTC)
        assert parse_received_time("2024-01-18T20:15:00Z") == expected
        assert parse_received_time("2024-01-18T14:15:00-06:00") == expected

    def test_invalid_values(self):
        assert parse_received_time(None) is None
        assert parse_received_time("") is None
        assert parse_received_time("invalid") is None
        assert parse_received_time(True) is None


class TestNormalizeAttributes:
    """Tests for single-feature normalization."""

    def test_maps_fields(self):
        incident = normalize_attributes(
            {
                "ObjectId": 42,
                "IncidentTypeCode": "52P",
                "IncidentTypeName": "BURGLARY - RESIDENCE",
                "CallReceivedTime": 1705595400000,
                "Location": "100 BROADWAY",
                "LocationDescription": "  ",
                "CityName": "NASHVILLE",
            }
        )

        assert incident is not None
        assert incident.incident_id == "42"
        assert incident.type_code == "52P"
        assert incident.type_name == "BURGLARY - RESIDENCE"
        assert incident.location == "100 BROADWAY"
        assert incident.location_description is None
        assert incident.city == "NASHVILLE"

    def test_missing_type_name_defaults(self):
        incident = normalize_attributes({"ObjectId": 1, "CallReceivedTime": 1705595400000})
        assert incident is not None
        assert incident.type_name == "UNKNOWN"

    def test_missing_required_fields(self):
        """Test features without an id or received time are rejected."""
        assert normalize_attributes({"CallReceivedTime": 1705595400000}) is None
        assert normalize_attributes({"ObjectId": 1}) is None
        assert normalize_attributes({"ObjectId": 1, "CallReceivedTime": "soon"}) is None


class TestNormalizeFeed:
    """Tests for whole-payload normalization."""

    def test_preserves_order(self, sample_feed_payload):
        incidents = normalize_feed(sample_feed_payload)
        assert [i.incident_id for i in incidents] == ["1", "2", "3"]

    def test_skips_invalid_features(self, make_feature):
        payload = {
            "features": [
                make_feature(1),
                {"attributes": {"ObjectId": 2}},
                make_feature(3),
            ]
        }
        incidents = normalize_feed(payload)
        assert [i.incident_id for i in incidents] == ["1", "3"]

    def test_empty_feed(self):
        assert normalize_feed({"features": []}) == []

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            "<html>maintenance</html>",
            {},
            {"features": "nope"},
            {"features": [{"geometry": None}]},
            {"error": {"code": 400, "message": "Invalid query"}},
        ],
    )
    def test_malformed_payload(self, payload):
        """Test malformed payloads raise instead of yielding an empty snapshot."""
        with pytest.raises(FeedParseError):
            normalize_feed(payload)

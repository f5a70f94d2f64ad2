"""Tests for windowed aggregate statistics."""

from datetime import timedelta

import pytest
import pytest_asyncio

from dispatch_tracker.services.aggregator import Aggregator
from dispatch_tracker.services.store import IncidentStore


@pytest_asyncio.fixture
async def seeded_store(db_session, make_incident, sample_datetime) -> IncidentStore:
    """Store with a mix of violent and non-violent occurrences."""
    store = IncidentStore(db_session)
    now = sample_datetime
    incidents = [
        # 16:30 UTC -> 10 AM CST on Jan 18
        make_incident("1", "ASSAULT/FIGHT", "2600 8TH AVE S", received_at=now.replace(hour=16, minute=30)),
        make_incident("2", "SHOTS FIRED", "2700 8TH AVE S", received_at=now.replace(hour=16, minute=45)),
        make_incident("3", "BURGLARY - RESIDENCE", "100 BROADWAY", received_at=now.replace(hour=17)),
        # 05:00 UTC -> 11 PM CST on Jan 17
        make_incident("4", "ROBBERY", "CHARLOTTE AVE / 28TH AVE N", city="NASHVILLE", received_at=now.replace(hour=5)),
        make_incident("5", "BURGLARY - RESIDENCE", "1 MAIN ST", city="MADISON", received_at=now.replace(hour=5, minute=30)),
        # Outside a 7 day window
        make_incident("6", "ASSAULT", "9 OLD RD", received_at=now - timedelta(days=10)),
    ]
    await store.record_snapshot(incidents, now=now)
    return store


class TestTypeStats:
    """Tests for per-type counts and durations."""

    @pytest.mark.asyncio
    async def test_counts_and_average_duration(self, db_session, make_incident, sample_datetime):
        store = IncidentStore(db_session)
        received = sample_datetime - timedelta(hours=3)
        await store.record_snapshot(
            [
                make_incident("1", "ALARM", received_at=received),
                make_incident("2", "ALARM", received_at=received),
                make_incident("3", "THEFT", received_at=received),
            ],
            now=received,
        )
        await store.mark_cleared(["1"], now=received + timedelta(minutes=30))
        await store.mark_cleared(["2"], now=received + timedelta(minutes=90))

        stats = await Aggregator(db_session).type_stats(hours=24, now=sample_datetime)

        assert [(s.type_name, s.count) for s in stats] == [("ALARM", 2), ("THEFT", 1)]
        assert stats[0].avg_duration_min == pytest.approx(60.0)
        # Still active, so no duration yet
        assert stats[1].avg_duration_min is None

    @pytest.mark.asyncio
    async def test_top_types_separates_noise(self, db_session, make_incident, sample_datetime):
        store = IncidentStore(db_session)
        await store.record_snapshot(
            [make_incident(f"w{i}", "WIRES DOWN") for i in range(3)]
            + [make_incident(f"t{i}", "TREE DOWN") for i in range(2)]
            + [make_incident("b1", "BURGLARY")],
            now=sample_datetime,
        )

        ranked, noise = await Aggregator(db_session).top_types(
            days=7, noise_types=["WIRES DOWN", "TREE DOWN"], now=sample_datetime
        )

        assert noise == 5
        assert [s.type_name for s in ranked] == ["BURGLARY"]


class TestWindowedStats:
    """Tests for daily, hourly and hotspot queries."""

    @pytest.mark.asyncio
    async def test_empty_window(self, db_session, sample_datetime):
        aggregator = Aggregator(db_session)

        assert await aggregator.daily_stats(days=30, now=sample_datetime) == []
        assert await aggregator.hourly_stats(days=30, now=sample_datetime) == []
        assert await aggregator.hotspot_streets(days=30, now=sample_datetime) == []

        overview = await aggregator.overview(days=7, now=sample_datetime)
        assert overview.total == 0
        assert overview.violent == 0
        assert overview.violent_pct == 0.0

    @pytest.mark.asyncio
    async def test_daily_uses_local_dates(self, seeded_store, db_session, sample_datetime):
        daily = await Aggregator(db_session).daily_stats(days=7, now=sample_datetime)

        assert [(d.day.isoformat(), d.total, d.violent) for d in daily] == [
            ("2024-01-18", 3, 2),
            ("2024-01-17", 2, 1),
        ]

    @pytest.mark.asyncio
    async def test_hourly(self, seeded_store, db_session, sample_datetime):
        hourly = await Aggregator(db_session).hourly_stats(days=7, now=sample_datetime)

        by_hour = {h.hour: (h.total, h.violent) for h in hourly}
        assert by_hour[10] == (2, 2)
        assert by_hour[11] == (1, 0)
        assert by_hour[23] == (2, 1)
        assert [h.hour for h in hourly] == sorted(by_hour)

    @pytest.mark.asyncio
    async def test_hotspots_count_violent_only(self, seeded_store, db_session, sample_datetime):
        hotspots = await Aggregator(db_session).hotspot_streets(days=7, now=sample_datetime)

        assert hotspots[0].street == "8TH AVE S"
        assert hotspots[0].count == 2
        streets = {h.street for h in hotspots}
        assert "BROADWAY" not in streets
        assert "CHARLOTTE AVE" in streets

    @pytest.mark.asyncio
    async def test_violent_by_hour(self, seeded_store, db_session, sample_datetime):
        rows = await Aggregator(db_session).violent_by_hour(days=7, now=sample_datetime)

        assert [(r.hour, r.type_name, r.count) for r in rows] == [
            (10, "ASSAULT/FIGHT", 1),
            (10, "SHOTS FIRED", 1),
            (23, "ROBBERY", 1),
        ]

    @pytest.mark.asyncio
    async def test_peak_hours_and_cities(self, seeded_store, db_session, sample_datetime):
        aggregator = Aggregator(db_session)

        peaks = await aggregator.peak_violent_hours(days=7, now=sample_datetime)
        assert peaks[0].hour == 10
        assert peaks[0].count == 2

        cities = await aggregator.city_breakdown(days=7, now=sample_datetime)
        assert cities[0].city == "NASHVILLE"
        assert (cities[0].total, cities[0].violent) == (4, 3)
        assert cities[1].city == "MADISON"

    @pytest.mark.asyncio
    async def test_overview(self, seeded_store, db_session, sample_datetime):
        overview = await Aggregator(db_session).overview(days=7, now=sample_datetime)

        assert overview.total == 5
        assert overview.violent == 3
        assert overview.violent_pct == 60.0

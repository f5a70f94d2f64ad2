"""Tests for message formatting."""

from datetime import date, timedelta

import pytest

from dispatch_tracker.schemas.stats import (
    CityStat,
    DailyStat,
    Hotspot,
    HourCount,
    Overview,
    TypeStat,
)
from dispatch_tracker.services.formatting import (
    format_changes_message,
    format_daily_table,
    format_hour,
    format_incident_line,
    format_status_message,
    format_type_stats,
    format_weekly_report,
)


class TestFormatHelpers:
    """Tests for small formatting helpers."""

    @pytest.mark.parametrize(
        ("hour", "expected"),
        [(0, "12 AM"), (1, "1 AM"), (11, "11 AM"), (12, "12 PM"), (13, "1 PM"), (23, "11 PM")],
    )
    def test_format_hour(self, hour, expected):
        assert format_hour(hour) == expected

    def test_incident_line(self, make_incident):
        line = format_incident_line(make_incident("1", "SHOTS FIRED", "500 MAIN ST", city="MADISON"))
        # 16:30 UTC is 10:30 AM in Nashville
        assert line == "🔴 **SHOTS FIRED** - 500 MAIN ST (MADISON) @ 10:30 AM"


class TestStatusMessage:
    """Tests for the active incident board."""

    def test_lists_newest_first(self, make_incident, sample_datetime, test_settings):
        incidents = [
            make_incident("1", "THEFT", received_at=sample_datetime - timedelta(hours=2)),
            make_incident("2", "ALARM", received_at=sample_datetime - timedelta(hours=1)),
        ]

        message = format_status_message(incidents, sample_datetime, test_settings)

        assert message.startswith("# 🚔 Nashville Active Dispatch\n**2 active incidents**")
        assert message.index("ALARM") < message.index("THEFT")
        assert "Updates every 2 minutes" in message

    def test_empty_board(self, sample_datetime, test_settings):
        message = format_status_message([], sample_datetime, test_settings)
        assert "_No active incidents right now_" in message
        assert "**0 active incidents**" in message

    def test_bounded_with_many_incidents(self, make_incident, sample_datetime, test_settings):
        incidents = [
            make_incident(str(i), "SAFETY HAZARD", f"{i} VERY LONG STREET NAME BLVD")
            for i in range(150)
        ]

        message = format_status_message(incidents, sample_datetime, test_settings)

        assert len(message) <= test_settings.message_char_limit
        shown = message.count("SAFETY HAZARD")
        assert f"_...and {150 - shown} more_" in message


class TestChangesMessage:
    """Tests for changes-only output."""

    def test_new_and_cleared_sections(self, make_incident, sample_datetime, test_settings):
        message = format_changes_message(
            [make_incident("4", "ROBBERY")],
            [make_incident("1", "THEFT", "9 ELM ST")],
            active_total=3,
            polled_at=sample_datetime,
            settings=test_settings,
        )

        assert "**🆕 1 New:**" in message
        assert "**✅ 1 Cleared:**" in message
        assert "~~THEFT - 9 ELM ST~~" in message
        assert "_Active: 3 |" in message


class TestStatsFormatting:
    """Tests for stats and report text."""

    def test_type_stats(self):
        text = format_type_stats(
            [TypeStat(type_name="ALARM", count=4, avg_duration_min=42.4)],
            hours=24,
            total_recorded=10,
        )
        assert "# 📊 Dispatch Stats (Last 24h)" in text
        assert "- **ALARM**: 4 (~42 min avg)" in text

    def test_daily_table(self):
        text = format_daily_table([DailyStat(day=date(2024, 1, 18), total=12, violent=3)])
        assert "| 2024-01-18 |    12 |       3 |" in text

    def test_daily_table_empty(self):
        assert "_No data_" in format_daily_table([])

    def test_weekly_report(self, sample_datetime, test_settings):
        text = format_weekly_report(
            period_start=date(2024, 1, 11),
            period_end=date(2024, 1, 18),
            overview=Overview(total=1234, violent=56, violent_pct=4.5),
            top_types=[TypeStat(type_name="ALARM", count=300)],
            noise_count=17,
            hotspots=[Hotspot(street="8TH AVE S", city="NASHVILLE", count=5)],
            peak_hours=[HourCount(hour=22, count=9)],
            cities=[
                CityStat(city="NASHVILLE", total=900, violent=50),
                CityStat(city="MADISON", total=30, violent=0),
            ],
            generated_at=sample_datetime,
            settings=test_settings,
        )

        assert "- **Total Incidents:** 1,234" in text
        assert "- **Violent Crimes:** 56 (4.5%)" in text
        assert "- Storm/Weather: 17" in text
        assert "- **8TH AVE S** (NASHVILLE): 5" in text
        assert "- 10 PM: 9 incidents" in text
        assert "- **NASHVILLE**: 50 violent / 900 total" in text
        assert "MADISON" not in text
        assert len(text) <= test_settings.message_char_limit

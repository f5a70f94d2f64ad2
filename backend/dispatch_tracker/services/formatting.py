"""Human-readable message builders on top of the bounded renderer."""

from collections.abc import Sequence
from datetime import date, datetime
from zoneinfo import ZoneInfo

from dispatch_tracker.config import Settings, get_settings
from dispatch_tracker.schemas.incident import FeedIncident
from dispatch_tracker.schemas.stats import (
    CityStat,
    DailyStat,
    Hotspot,
    HourCount,
    Overview,
    TypeStat,
)
from dispatch_tracker.services.classifier import classify
from dispatch_tracker.services.clock import local_zone, to_local
from dispatch_tracker.services.renderer import render_bounded

NO_DATA = "_No data_"


def format_time(value: datetime, tz: ZoneInfo | None = None) -> str:
    """Local 12-hour clock time, e.g. '09:05 PM'."""
    return to_local(value, tz).strftime("%I:%M %p")


def format_timestamp(value: datetime, tz: ZoneInfo | None = None) -> str:
    """Local date and time, e.g. 'Jan 18, 2024, 09:05 PM CST'."""
    return to_local(value, tz).strftime("%b %d, %Y, %I:%M %p %Z")


def format_date(value: date) -> str:
    return value.strftime("%b %d, %Y")


def format_hour(hour: int) -> str:
    if hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"


def format_incident_line(incident: FeedIncident, tz: ZoneInfo | None = None) -> str:
    emoji = classify(incident.type_code, incident.type_name).emoji
    city = f" ({incident.city})" if incident.city else ""
    location = incident.location or "Unknown"
    return f"{emoji} **{incident.type_name}** - {location}{city} @ {format_time(incident.received_at, tz)}"


def format_cleared_line(incident: FeedIncident) -> str:
    return f"~~{incident.type_name} - {incident.location or 'Unknown'}~~"


def format_status_message(
    incidents: Sequence[FeedIncident],
    polled_at: datetime,
    settings: Settings | None = None,
) -> str:
    """Full board of active incidents, newest first, within the message limit."""
    settings = settings or get_settings()
    tz = local_zone(settings.local_timezone)

    ordered = sorted(incidents, key=lambda incident: incident.received_at, reverse=True)
    plural = "s" if len(ordered) != 1 else ""
    header = (
        f"# 🚔 {settings.site_name} Active Dispatch\n"
        f"**{len(ordered)} active incident{plural}**\n\n"
    )
    footer = (
        f"\n---\n_Last polled: {format_timestamp(polled_at, tz)}_\n"
        f"_Updates every {_interval_text(settings.poll_interval_seconds)} | "
        f"Data: {settings.site_name} Open Data Portal_"
    )

    return render_bounded(
        (format_incident_line(incident, tz) for incident in ordered),
        budget=settings.message_char_limit,
        header=header,
        footer=footer,
        reserve=settings.truncation_reserve,
        empty_text="_No active incidents right now_ ✅",
    )


def format_changes_message(
    new: Sequence[FeedIncident],
    cleared: Sequence[FeedIncident],
    active_total: int,
    polled_at: datetime,
    settings: Settings | None = None,
) -> str:
    """New/cleared summary for changes-only output mode."""
    settings = settings or get_settings()
    tz = local_zone(settings.local_timezone)

    lines: list[str] = []
    if new:
        lines.append(f"**🆕 {len(new)} New:**")
        lines.extend(format_incident_line(incident, tz) for incident in new)
    if cleared:
        if lines:
            lines.append("")
        lines.append(f"**✅ {len(cleared)} Cleared:**")
        lines.extend(format_cleared_line(incident) for incident in cleared)

    footer = f"\n\n_Active: {active_total} | Last polled: {format_timestamp(polled_at, tz)}_"
    return render_bounded(
        lines,
        budget=settings.message_char_limit,
        footer=footer,
        reserve=settings.truncation_reserve,
    )


def format_type_stats(stats: Sequence[TypeStat], hours: float, total_recorded: int) -> str:
    lines = [
        f"# 📊 Dispatch Stats (Last {hours:g}h)",
        "",
        f"**Total incidents recorded:** {total_recorded}",
        "",
        "## Top Incident Types",
        "",
    ]
    if not stats:
        lines.append(NO_DATA)
    for stat in stats:
        duration = (
            f" (~{round(stat.avg_duration_min)} min avg)"
            if stat.avg_duration_min is not None
            else ""
        )
        lines.append(f"- **{stat.type_name}**: {stat.count}{duration}")
    return "\n".join(lines)


def format_daily_table(daily: Sequence[DailyStat], days: int = 30) -> str:
    lines = [
        f"# 📊 Dispatch - Daily Stats (Last {days} Days)",
        "",
        "| Date       | Total | Violent |",
        "|------------|-------|---------|",
    ]
    for day in daily:
        lines.append(f"| {day.day.isoformat()} | {day.total:>5} | {day.violent:>7} |")
    if not daily:
        lines.append(NO_DATA)
    return "\n".join(lines)


def format_weekly_report(
    *,
    period_start: date,
    period_end: date,
    overview: Overview,
    top_types: Sequence[TypeStat],
    noise_count: int,
    hotspots: Sequence[Hotspot],
    peak_hours: Sequence[HourCount],
    cities: Sequence[CityStat],
    generated_at: datetime,
    settings: Settings | None = None,
) -> str:
    """Weekly analysis report, bounded to the message limit."""
    settings = settings or get_settings()
    tz = local_zone(settings.local_timezone)

    header = (
        f"# 📊 {settings.site_name} Dispatch Weekly Report\n"
        f"**{format_date(period_start)} - {format_date(period_end)}**\n\n"
    )
    footer = (
        f"\n---\n_Generated: {format_timestamp(generated_at, tz)} | "
        f"Data: {settings.site_name} Open Data Portal_"
    )

    lines = [
        "## Overview",
        f"- **Total Incidents:** {overview.total:,}",
        f"- **Violent Crimes:** {overview.violent} ({overview.violent_pct:.1f}%)",
        "",
        "## Top Incident Types",
    ]
    if noise_count:
        lines.append(f"- Storm/Weather: {noise_count}")
    lines.extend(f"- {stat.type_name}: {stat.count}" for stat in top_types)
    if not top_types and not noise_count:
        lines.append(NO_DATA)
    lines.append("")

    if hotspots:
        lines.append("## 🔥 Violent Crime Hotspots")
        lines.extend(f"- **{h.street}** ({h.city or 'Unknown'}): {h.count}" for h in hotspots)
        lines.append("")

    if peak_hours:
        lines.append("## ⏰ Peak Hours (Violent Crime)")
        lines.extend(f"- {format_hour(h.hour)}: {h.count} incidents" for h in peak_hours)
        lines.append("")

    lines.append("## 📍 Areas by Violent Crime")
    violent_cities = [city for city in cities if city.violent > 0]
    if violent_cities:
        lines.extend(
            f"- **{c.city}**: {c.violent} violent / {c.total} total" for c in violent_cities
        )
    else:
        lines.append(NO_DATA)

    return render_bounded(
        lines,
        budget=settings.message_char_limit,
        header=header,
        footer=footer,
        reserve=settings.truncation_reserve,
    )


def _interval_text(seconds: int) -> str:
    if seconds % 60 == 0:
        minutes = seconds // 60
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    return f"{seconds} seconds"

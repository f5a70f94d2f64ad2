#!/usr/bin/env python3
"""
Print dispatch statistics from the incident store.

Usage:
    python scripts/dispatch_stats.py [--json] [--hours=N] [--daily] [--report]
"""

import asyncio
import json
import sys

from dispatch_tracker.database import async_session_maker, engine
from dispatch_tracker.services.aggregator import Aggregator
from dispatch_tracker.services.formatting import format_daily_table, format_type_stats
from dispatch_tracker.services.reports import ReportService
from dispatch_tracker.services.store import IncidentStore

DAILY_DAYS = 30


def log(msg):
    """Print with flush for immediate output."""
    print(msg, flush=True)


def parse_hours(args: list[str], default: int = 24) -> int:
    for arg in args:
        if arg.startswith("--hours="):
            return int(arg.split("=", 1)[1])
    return default


async def print_stats(args: list[str]) -> None:
    as_json = "--json" in args

    async with async_session_maker() as db:
        if "--report" in args:
            # Generates and archives the report for the trailing week
            report = await ReportService(db).generate()
            log(report.report_text)
        elif "--daily" in args:
            daily = await Aggregator(db).daily_stats(days=DAILY_DAYS)
            if as_json:
                log(json.dumps([d.model_dump(mode="json") for d in daily], indent=2))
            else:
                log(format_daily_table(daily, days=DAILY_DAYS))
        else:
            hours = parse_hours(args)
            types = await Aggregator(db).type_stats(hours=hours)
            total = await IncidentStore(db).total_count()
            if as_json:
                payload = {
                    "total": total,
                    "hours": hours,
                    "types": [t.model_dump() for t in types],
                }
                log(json.dumps(payload, indent=2))
            else:
                log(format_type_stats(types, hours=hours, total_recorded=total))

    await engine.dispose()


if __name__ == "__main__":
    args = sys.argv[1:]
    try:
        parse_hours(args)
    except ValueError:
        log("Error: --hours expects an integer, e.g. --hours=48")
        sys.exit(1)

    asyncio.run(print_stats(args))

"""Services for feed ingestion, lifecycle tracking and reporting."""

from dispatch_tracker.services.aggregator import Aggregator
from dispatch_tracker.services.feed_client import DispatchFeedClient
from dispatch_tracker.services.monitor import DispatchMonitor
from dispatch_tracker.services.reports import ReportService
from dispatch_tracker.services.store import IncidentStore

__all__ = [
    "Aggregator",
    "DispatchFeedClient",
    "DispatchMonitor",
    "IncidentStore",
    "ReportService",
]

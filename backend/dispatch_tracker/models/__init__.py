"""Database models."""

from dispatch_tracker.models.incident import Incident
from dispatch_tracker.models.report import WeeklyReport
from dispatch_tracker.models.snapshot_state import SnapshotState

__all__ = [
    "Incident",
    "SnapshotState",
    "WeeklyReport",
]

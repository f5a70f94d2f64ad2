"""SnapshotState model: the last feed snapshot, persisted between polls."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from dispatch_tracker.database import Base


class SnapshotState(Base):
    """
    Last successfully polled snapshot for a feed source.

    Replaced wholesale after every successful poll cycle.
    """

    __tablename__ = "snapshot_state"

    source: Mapped[str] = mapped_column(String(50), primary_key=True)
    # incident_id -> serialized FeedIncident
    incidents: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    fingerprint: Mapped[str | None] = mapped_column(String(64))
    last_update_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    record_count: Mapped[int] = mapped_column(Integer, server_default="0", nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<SnapshotState {self.source}: {self.record_count} @ {self.last_update_at}>"

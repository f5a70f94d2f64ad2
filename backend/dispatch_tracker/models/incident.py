"""Incident model: one row per observed (incident_id, received_at) occurrence."""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column

from dispatch_tracker.database import Base


class Incident(Base):
    """
    Lifecycle record of one dispatch occurrence.

    The feed recycles ObjectIds, so the occurrence key is the pair
    (incident_id, received_at). Rows are insert-or-ignore; once cleared,
    a row is only touched again by the derived-field backfill.
    """

    __tablename__ = "incidents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    incident_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Feed fields, copied at first observation
    type_code: Mapped[str | None] = mapped_column(String(32))
    type_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location: Mapped[str | None] = mapped_column(String(255))
    location_description: Mapped[str | None] = mapped_column(String(255))
    city: Mapped[str | None] = mapped_column(String(100), index=True)
    received_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Observation window
    first_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    cleared: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False, index=True
    )
    cleared_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Derived grouping fields (local time)
    street: Mapped[str | None] = mapped_column(String(255), index=True)
    hour_bucket: Mapped[int | None] = mapped_column(Integer, index=True)
    call_date: Mapped[date | None] = mapped_column(Date)

    __table_args__ = (
        UniqueConstraint("incident_id", "received_at", name="uq_incidents_occurrence"),
        Index("idx_incidents_received_at", received_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Incident {self.incident_id}@{self.received_at}: {self.type_name}>"

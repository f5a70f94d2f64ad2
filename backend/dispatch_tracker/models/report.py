"""WeeklyReport model for archived periodic reports."""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from dispatch_tracker.database import Base


class WeeklyReport(Base):
    """
    One rendered report per reporting period.

    period_start is unique: regenerating a period overwrites its row.
    """

    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    period_start: Mapped[date] = mapped_column(Date, unique=True, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    report_text: Mapped[str] = mapped_column(Text, nullable=False)

    total_incidents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    violent_incidents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    top_streets: Mapped[str | None] = mapped_column(Text)  # JSON
    peak_hours: Mapped[str | None] = mapped_column(Text)  # JSON

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<WeeklyReport {self.period_start}..{self.period_end}>"

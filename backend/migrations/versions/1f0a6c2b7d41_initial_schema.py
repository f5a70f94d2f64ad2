"""Initial schema for the dispatch tracker.

Revision ID: 1f0a6c2b7d41
Revises: None
Create Date: 2026-09-28
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "1f0a6c2b7d41"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "incidents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("incident_id", sa.String(length=64), nullable=False),
        sa.Column("type_code", sa.String(length=32), nullable=True),
        sa.Column("type_name", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("location_description", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("first_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("cleared", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("cleared_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("incident_id", "received_at", name="uq_incidents_occurrence"),
        if_not_exists=True,
    )

    op.create_table(
        "snapshot_state",
        sa.Column("source", sa.String(length=50), primary_key=True, nullable=False),
        sa.Column("incidents", sa.JSON(), nullable=False),
        sa.Column("fingerprint", sa.String(length=64), nullable=True),
        sa.Column("last_update_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("record_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        if_not_exists=True,
    )

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("report_text", sa.Text(), nullable=False),
        sa.Column("total_incidents", sa.Integer(), nullable=False),
        sa.Column("violent_incidents", sa.Integer(), nullable=False),
        sa.Column("top_streets", sa.Text(), nullable=True),
        sa.Column("peak_hours", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("period_start"),
        if_not_exists=True,
    )

    # Indexes - incidents
    op.create_index("ix_incidents_type_name", "incidents", ["type_name"], if_not_exists=True)
    op.create_index("ix_incidents_city", "incidents", ["city"], if_not_exists=True)
    op.create_index("ix_incidents_cleared", "incidents", ["cleared"], if_not_exists=True)
    op.create_index(
        "idx_incidents_received_at",
        "incidents",
        [sa.text("received_at DESC")],
        if_not_exists=True,
    )


def downgrade() -> None:
    op.drop_index("idx_incidents_received_at", table_name="incidents", if_exists=True)
    op.drop_index("ix_incidents_cleared", table_name="incidents", if_exists=True)
    op.drop_index("ix_incidents_city", table_name="incidents", if_exists=True)
    op.drop_index("ix_incidents_type_name", table_name="incidents", if_exists=True)

    op.drop_table("reports", if_exists=True)
    op.drop_table("snapshot_state", if_exists=True)
    op.drop_table("incidents", if_exists=True)

"""Add derived street, hour and date columns to incidents.

Existing rows are filled in by the application's startup backfill, which
computes them in the configured local timezone.

Revision ID: 2b7e9d3c5a18
Revises: 1f0a6c2b7d41
Create Date: 2026-10-05
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "2b7e9d3c5a18"
down_revision: str | None = "1f0a6c2b7d41"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column("incidents", sa.Column("street", sa.String(length=255), nullable=True))
    op.add_column("incidents", sa.Column("hour_bucket", sa.Integer(), nullable=True))
    op.add_column("incidents", sa.Column("call_date", sa.Date(), nullable=True))

    op.create_index("ix_incidents_street", "incidents", ["street"], if_not_exists=True)
    op.create_index(
        "ix_incidents_hour_bucket", "incidents", ["hour_bucket"], if_not_exists=True
    )


def downgrade() -> None:
    op.drop_index("ix_incidents_hour_bucket", table_name="incidents", if_exists=True)
    op.drop_index("ix_incidents_street", table_name="incidents", if_exists=True)

    op.drop_column("incidents", "call_date")
    op.drop_column("incidents", "hour_bucket")
    op.drop_column("incidents", "street")

"""create energy_readings table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "energy_readings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=16), nullable=False),
        sa.Column("source", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "timestamp",
            "type",
            "source",
            name="uq_energy_readings_timestamp_type_source",
        ),
    )
    op.create_index("ix_energy_readings_timestamp", "energy_readings", ["timestamp"], unique=False)
    op.create_index("ix_energy_readings_type", "energy_readings", ["type"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_energy_readings_type", table_name="energy_readings")
    op.drop_index("ix_energy_readings_timestamp", table_name="energy_readings")
    op.drop_table("energy_readings")

"""create_vehicle_and_job_tables

Revision ID: b4e1c7a2d9f3
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "b4e1c7a2d9f3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create vehicle (fleet directory) and job (job ledger) tables."""
    op.create_table(
        "vehicle",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("region", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("battery_level", sa.Float(), nullable=False),
        sa.Column("drain_rate_km_per_percent", sa.Float(), nullable=False),
        sa.Column("location_lat", sa.Float(), nullable=False),
        sa.Column("location_lng", sa.Float(), nullable=False),
        sa.Column("current_job_id", sa.String(length=64), nullable=True),
        sa.Column("vehicle_type", sa.String(length=32), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_vehicle_region", "vehicle", ["region"])
    op.create_index("ix_vehicle_status", "vehicle", ["status"])

    op.create_table(
        "job",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("job_type", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("assigned_vehicle_id", sa.String(length=64), nullable=True),
        sa.Column("customer_id", sa.String(length=255), nullable=False),
        sa.Column("region", sa.String(length=64), nullable=False),
        sa.Column("pickup_lat", sa.Float(), nullable=False),
        sa.Column("pickup_lng", sa.Float(), nullable=False),
        sa.Column("destination_lat", sa.Float(), nullable=False),
        sa.Column("destination_lng", sa.Float(), nullable=False),
        sa.Column("estimated_distance_km", sa.Float(), nullable=False),
        sa.Column("delivery_details", sa.JSON(), nullable=True),
        sa.Column("fare_amount", sa.Float(), nullable=False),
        sa.Column("base_fare", sa.Float(), nullable=False),
        sa.Column("distance_fare", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_job_status", "job", ["status"])
    op.create_index("ix_job_assigned_vehicle_id", "job", ["assigned_vehicle_id"])


def downgrade() -> None:
    """Drop job and vehicle tables."""
    op.drop_index("ix_job_assigned_vehicle_id", table_name="job")
    op.drop_index("ix_job_status", table_name="job")
    op.drop_table("job", if_exists=True)
    op.drop_index("ix_vehicle_status", table_name="vehicle")
    op.drop_index("ix_vehicle_region", table_name="vehicle")
    op.drop_table("vehicle", if_exists=True)

"""Tabla anpr_events para los eventos decodificados"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_anpr_events"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "anpr_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ip_address", sa.String(length=64), nullable=False),
        sa.Column("date_time", sa.String(length=64), nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("license_plate", sa.String(length=32), nullable=False),
        sa.Column("vehicle_type", sa.String(length=64), nullable=False),
        sa.Column("vehicle_color", sa.String(length=64), nullable=False),
        sa.Column("vehicle_speed", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_anpr_events_id"), "anpr_events", ["id"], unique=False)
    op.create_index(
        op.f("ix_anpr_events_license_plate"), "anpr_events", ["license_plate"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_anpr_events_license_plate"), table_name="anpr_events")
    op.drop_index(op.f("ix_anpr_events_id"), table_name="anpr_events")
    op.drop_table("anpr_events")

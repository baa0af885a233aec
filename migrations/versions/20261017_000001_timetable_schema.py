"""Timetable schema.

Revision ID: 20261017_000001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "timetable",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "name", name="uq_timetable_owner_name"),
    )
    op.create_index("ix_timetable_owner_id", "timetable", ["owner_id"])

    op.create_table(
        "catalog_activity",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("timetable_id", sa.Integer(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("time", sa.String(length=11), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(["timetable_id"], ["timetable.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_catalog_activity_timetable_id", "catalog_activity", ["timetable_id"])

    op.create_table(
        "timetable_week",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("timetable_id", sa.Integer(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.Column("week_start_date", sa.DateTime(), nullable=False),
        sa.Column("week_end_date", sa.DateTime(), nullable=False),
        sa.Column("overall_completion_rate", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["timetable_id"], ["timetable.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_timetable_week_timetable_id", "timetable_week", ["timetable_id"])

    op.create_table(
        "daily_progress",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("week_id", sa.Integer(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("time", sa.String(length=11), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("daily_status", sa.JSON(), nullable=False),
        sa.Column("completion_rate", sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(["week_id"], ["timetable_week.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_daily_progress_week_id", "daily_progress", ["week_id"])


def downgrade() -> None:
    op.drop_index("ix_daily_progress_week_id", table_name="daily_progress")
    op.drop_table("daily_progress")
    op.drop_index("ix_timetable_week_timetable_id", table_name="timetable_week")
    op.drop_table("timetable_week")
    op.drop_index("ix_catalog_activity_timetable_id", table_name="catalog_activity")
    op.drop_table("catalog_activity")
    op.drop_index("ix_timetable_owner_id", table_name="timetable")
    op.drop_table("timetable")

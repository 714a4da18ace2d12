"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates:
- profile (generation quota, travel preferences)
- plan (trip data, generated content document)
- fixed_point (immovable commitments, cascades with plan)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # profile table
    op.create_table(
        "profile",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("generations_remaining", sa.Integer(), server_default=sa.text("5"), nullable=False),
        sa.Column("preferences", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("travel_pace", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("generations_remaining >= 0", name="ck_profile_generations_non_negative"),
    )

    # plan table
    op.create_table(
        "plan",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("destination", sa.Text(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), server_default=sa.text("'draft'"), nullable=False),
        sa.Column("generated_content", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("status IN ('draft', 'generated', 'archived')", name="ck_plan_status"),
    )
    op.create_index("idx_plan_user_status", "plan", ["user_id", "status"])

    # fixed_point table
    op.create_table(
        "fixed_point",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("plan_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("event_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("event_duration", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["plan_id"], ["plan.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_fixed_point_plan_event", "fixed_point", ["plan_id", "event_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_fixed_point_plan_event", table_name="fixed_point")
    op.drop_table("fixed_point")
    op.drop_index("idx_plan_user_status", table_name="plan")
    op.drop_table("plan")
    op.drop_table("profile")

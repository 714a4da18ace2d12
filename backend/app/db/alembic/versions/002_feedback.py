"""Add feedback table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

Creates:
- feedback (one rating per plan and user, cascades with plan)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create feedback table."""
    op.create_table(
        "feedback",
        sa.Column("plan_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("rating", sa.Text(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("plan_id", "user_id"),
        sa.ForeignKeyConstraint(["plan_id"], ["plan.id"], ondelete="CASCADE"),
        sa.CheckConstraint("rating IN ('thumbs_up', 'thumbs_down')", name="ck_feedback_rating"),
    )


def downgrade() -> None:
    """Drop feedback table."""
    op.drop_table("feedback")

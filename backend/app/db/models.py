"""SQLAlchemy ORM models for plans, fixed points, profiles and feedback."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JsonDocument = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Profile(Base):
    """Profile table - per-user generation quota and travel preferences."""

    __tablename__ = "profile"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    generations_remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    preferences: Mapped[list[str]] = mapped_column(JsonDocument, nullable=False, default=list)
    travel_pace: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )


class Plan(Base):
    """Plan table - one row per trip, generated content stored as one JSON document."""

    __tablename__ = "plan"
    __table_args__ = (Index("idx_plan_user_status", "user_id", "status"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="draft")
    generated_content: Mapped[dict[str, Any] | None] = mapped_column(JsonDocument, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    fixed_points: Mapped[list["FixedPoint"]] = relationship(
        "FixedPoint",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="FixedPoint.event_at",
    )
    feedback: Mapped[list["Feedback"]] = relationship(
        "Feedback", back_populates="plan", cascade="all, delete-orphan"
    )


class FixedPoint(Base):
    """Fixed point table - immovable commitments of a plan."""

    __tablename__ = "fixed_point"
    __table_args__ = (Index("idx_fixed_point_plan_event", "plan_id", "event_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    plan_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("plan.id", ondelete="CASCADE"), nullable=False
    )
    location: Mapped[str] = mapped_column(Text, nullable=False)
    event_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    event_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    plan: Mapped["Plan"] = relationship("Plan", back_populates="fixed_points")


class Feedback(Base):
    """Feedback table - one rating per plan and user."""

    __tablename__ = "feedback"

    plan_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("plan.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    rating: Mapped[str] = mapped_column(Text, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    plan: Mapped["Plan"] = relationship("Plan", back_populates="feedback")

"""SQL implementation of repository interfaces."""

import logging
import uuid
from typing import Any, NoReturn

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.db.models import Feedback as FeedbackRow
from backend.app.db.models import FixedPoint as FixedPointRow
from backend.app.db.models import Plan as PlanRow
from backend.app.db.models import Profile as ProfileRow
from backend.app.errors import ConflictError, DatabaseError, NotFoundError, QuotaExceededError
from backend.app.models.common import FeedbackRating, PlanStatus, TravelPace
from backend.app.models.feedback import Feedback
from backend.app.models.plan import (
    CreateFixedPointCommand,
    CreatePlanCommand,
    FixedPoint,
    Plan,
    Profile,
)

logger = logging.getLogger(__name__)


def _to_plan(row: PlanRow) -> Plan:
    return Plan(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        destination=row.destination,
        start_date=row.start_date,
        end_date=row.end_date,
        notes=row.notes,
        status=PlanStatus(row.status),
        generated_content=row.generated_content,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_fixed_point(row: FixedPointRow) -> FixedPoint:
    return FixedPoint(
        id=row.id,
        plan_id=row.plan_id,
        location=row.location,
        event_at=row.event_at,
        event_duration=row.event_duration,
        description=row.description,
    )


def _to_profile(row: ProfileRow) -> Profile:
    return Profile(
        user_id=row.user_id,
        generations_remaining=row.generations_remaining,
        preferences=list(row.preferences or []),
        travel_pace=TravelPace(row.travel_pace) if row.travel_pace else None,
    )


def _to_feedback(row: FeedbackRow) -> Feedback:
    return Feedback(
        plan_id=row.plan_id,
        user_id=row.user_id,
        rating=FeedbackRating(row.rating),
        comment=row.comment,
        updated_at=row.updated_at,
    )


# Sortable plan list columns
_PLAN_SORT_COLUMNS = {"created_at": PlanRow.created_at, "name": PlanRow.name}

class SqlPlanRepository:
    """SQL implementation of PlanRepository.

    Each method is one transaction: commit on success, rollback and
    DatabaseError on any SQLAlchemy failure.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def create_plan(self, user_id: uuid.UUID, command: CreatePlanCommand) -> Plan:
        """Create a new draft plan."""
        row = PlanRow(
            id=uuid.uuid4(),
            user_id=user_id,
            name=command.name,
            destination=command.destination,
            start_date=command.start_date,
            end_date=command.end_date,
            notes=command.notes,
            status=PlanStatus.draft.value,
        )

        try:
            self._session.add(row)
            self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("create plan", e)

        return _to_plan(row)

    def get_plan(self, plan_id: uuid.UUID) -> Plan | None:
        """Get plan by ID."""
        try:
            row = self._session.get(PlanRow, plan_id)
        except SQLAlchemyError as e:
            self._rollback("fetch plan", e)

        return _to_plan(row) if row is not None else None

    def list_plans(
        self,
        user_id: uuid.UUID,
        statuses: list[PlanStatus] | None,
        sort_by: str,
        descending: bool,
        limit: int,
        offset: int,
    ) -> tuple[list[Plan], int]:
        """List one page of a user's plans."""
        criteria = [PlanRow.user_id == user_id]
        if statuses:
            criteria.append(PlanRow.status.in_([s.value for s in statuses]))

        column = _PLAN_SORT_COLUMNS[sort_by]
        try:
            total = self._session.scalar(select(func.count()).select_from(PlanRow).where(*criteria))
            rows = self._session.scalars(
                select(PlanRow)
                .where(*criteria)
                .order_by(column.desc() if descending else column.asc(), PlanRow.id)
                .limit(limit)
                .offset(offset)
            ).all()
        except SQLAlchemyError as e:
            self._rollback("fetch plans", e)

        return [_to_plan(row) for row in rows], int(total or 0)

    def update_plan(self, plan_id: uuid.UUID, changes: dict[str, Any]) -> Plan:
        """Apply field changes to a plan."""
        try:
            row = self._require_plan(plan_id)
            for field, value in changes.items():
                setattr(row, field, value)
            self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("update plan", e)

        return _to_plan(row)

    def update_plan_status(self, plan_id: uuid.UUID, status: PlanStatus) -> Plan:
        """Set a plan's status."""
        try:
            row = self._require_plan(plan_id)
            row.status = status.value
            self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("update plan status", e)

        return _to_plan(row)

    def delete_plan(self, plan_id: uuid.UUID) -> None:
        """Delete a plan with its fixed points and feedback."""
        try:
            row = self._session.get(PlanRow, plan_id)
            if row is not None:
                self._session.delete(row)
                self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("delete plan", e)

    def add_fixed_point(
        self, plan_id: uuid.UUID, command: CreateFixedPointCommand
    ) -> FixedPoint:
        """Attach a fixed point to a plan."""
        try:
            self._require_plan(plan_id)
            row = FixedPointRow(id=uuid.uuid4(), plan_id=plan_id, **command.model_dump())
            self._session.add(row)
            self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("create fixed point", e)

        return _to_fixed_point(row)

    def list_fixed_points(self, plan_id: uuid.UUID) -> list[FixedPoint]:
        """List a plan's fixed points ordered by event time."""
        try:
            rows = self._session.scalars(
                select(FixedPointRow)
                .where(FixedPointRow.plan_id == plan_id)
                .order_by(FixedPointRow.event_at)
            ).all()
        except SQLAlchemyError as e:
            self._rollback("fetch fixed points", e)

        return [_to_fixed_point(row) for row in rows]

    def update_fixed_point(
        self, plan_id: uuid.UUID, fixed_point_id: uuid.UUID, changes: dict[str, Any]
    ) -> FixedPoint:
        """Apply field changes to one fixed point."""
        try:
            row = self._require_fixed_point(plan_id, fixed_point_id)
            for field, value in changes.items():
                setattr(row, field, value)
            self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("update fixed point", e)

        return _to_fixed_point(row)

    def delete_fixed_point(self, plan_id: uuid.UUID, fixed_point_id: uuid.UUID) -> None:
        """Remove one fixed point."""
        try:
            row = self._require_fixed_point(plan_id, fixed_point_id)
            self._session.delete(row)
            self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("delete fixed point", e)

    def get_profile(self, user_id: uuid.UUID) -> Profile | None:
        """Get the user's profile."""
        try:
            row = self._session.get(ProfileRow, user_id)
        except SQLAlchemyError as e:
            self._rollback("fetch profile", e)

        return _to_profile(row) if row is not None else None

    def ensure_profile(self, user_id: uuid.UUID, generations_limit: int) -> Profile:
        """Get the user's profile, creating it if missing."""
        try:
            row = self._session.get(ProfileRow, user_id)
            if row is None:
                row = ProfileRow(
                    user_id=user_id,
                    generations_remaining=generations_limit,
                    preferences=[],
                )
                self._session.add(row)
                self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("create profile", e)

        return _to_profile(row)

    def update_profile(self, user_id: uuid.UUID, changes: dict[str, Any]) -> Profile:
        """Apply preference changes to a profile."""
        try:
            row = self._session.get(ProfileRow, user_id)
            if row is None:
                raise NotFoundError("Profile not found.")
            if "preferences" in changes:
                row.preferences = list(changes["preferences"])
            if "travel_pace" in changes:
                pace = changes["travel_pace"]
                row.travel_pace = pace.value if pace is not None else None
            self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("update profile", e)

        return _to_profile(row)

    def commit_generation(
        self, plan_id: uuid.UUID, user_id: uuid.UUID, content: dict[str, Any]
    ) -> int:
        """Atomically store generated content and charge one generation.

        The quota decrement and the content write are conditional UPDATEs, so
        concurrent commits can never drive the counter below zero or revive a
        plan archived while its generation was in flight.
        """
        try:
            result = self._session.execute(
                update(ProfileRow)
                .where(
                    ProfileRow.user_id == user_id,
                    ProfileRow.generations_remaining > 0,
                )
                .values(generations_remaining=ProfileRow.generations_remaining - 1)
            )
            if result.rowcount != 1:
                self._session.rollback()
                raise QuotaExceededError()

            result = self._session.execute(
                update(PlanRow)
                .where(
                    PlanRow.id == plan_id,
                    PlanRow.status != PlanStatus.archived.value,
                )
                .values(generated_content=content, status=PlanStatus.generated.value)
            )
            if result.rowcount != 1:
                self._session.rollback()
                if self._session.get(PlanRow, plan_id) is None:
                    raise NotFoundError("Plan not found.")
                raise ConflictError("Archived plans cannot be regenerated.")

            remaining = self._session.scalar(
                select(ProfileRow.generations_remaining).where(ProfileRow.user_id == user_id)
            )
            self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("save generated plan", e)

        return int(remaining or 0)

    def save_generated_content(self, plan_id: uuid.UUID, content: dict[str, Any]) -> None:
        """Replace the whole generated content document."""
        try:
            row = self._require_plan(plan_id)
            row.generated_content = content
            self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("save generated content", e)

    def save_feedback(
        self,
        plan_id: uuid.UUID,
        user_id: uuid.UUID,
        rating: FeedbackRating,
        comment: str | None,
    ) -> Feedback:
        """Create or replace the user's feedback on a plan."""
        try:
            self._require_plan(plan_id)
            row = self._session.get(FeedbackRow, (plan_id, user_id))
            if row is None:
                row = FeedbackRow(plan_id=plan_id, user_id=user_id, rating=rating.value)
                self._session.add(row)
            row.rating = rating.value
            row.comment = comment
            self._session.commit()
        except SQLAlchemyError as e:
            self._rollback("submit feedback", e)

        return _to_feedback(row)

    def get_feedback(self, plan_id: uuid.UUID, user_id: uuid.UUID) -> Feedback | None:
        """Get the user's feedback on a plan."""
        try:
            row = self._session.get(FeedbackRow, (plan_id, user_id))
        except SQLAlchemyError as e:
            self._rollback("fetch feedback", e)

        return _to_feedback(row) if row is not None else None

    def _require_plan(self, plan_id: uuid.UUID) -> PlanRow:
        row = self._session.get(PlanRow, plan_id)
        if row is None:
            raise NotFoundError("Plan not found.")
        return row

    def _require_fixed_point(self, plan_id: uuid.UUID, fixed_point_id: uuid.UUID) -> FixedPointRow:
        row = self._session.get(FixedPointRow, fixed_point_id)
        if row is None or row.plan_id != plan_id:
            raise NotFoundError("Fixed point not found.")
        return row

    def _rollback(self, operation: str, error: SQLAlchemyError) -> NoReturn:
        self._session.rollback()
        logger.error(f"Failed to {operation}: {error}")
        raise DatabaseError(f"Failed to {operation}. Please try again later.", error) from error

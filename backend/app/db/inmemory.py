"""In-memory implementation of repository interfaces."""

import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from backend.app.errors import ConflictError, NotFoundError, QuotaExceededError
from backend.app.models.common import FeedbackRating, PlanStatus
from backend.app.models.feedback import Feedback
from backend.app.models.plan import (
    CreateFixedPointCommand,
    CreatePlanCommand,
    FixedPoint,
    Plan,
    Profile,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPlanRepository:
    """In-memory implementation of PlanRepository.

    A single lock guards every write so `commit_generation` applies the quota
    charge and the content save together. Stored documents are deep-copied on
    the way in and out so callers never alias stored state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._plans: dict[uuid.UUID, Plan] = {}
        self._fixed_points: dict[uuid.UUID, list[FixedPoint]] = {}
        self._profiles: dict[uuid.UUID, Profile] = {}
        self._feedback: dict[tuple[uuid.UUID, uuid.UUID], Feedback] = {}

    def create_plan(self, user_id: uuid.UUID, command: CreatePlanCommand) -> Plan:
        """Create a new draft plan."""
        now = _now()
        plan = Plan(
            id=uuid.uuid4(),
            user_id=user_id,
            name=command.name,
            destination=command.destination,
            start_date=command.start_date,
            end_date=command.end_date,
            notes=command.notes,
            status=PlanStatus.draft,
            generated_content=None,
            created_at=now,
            updated_at=now,
        )

        with self._lock:
            self._plans[plan.id] = plan
            self._fixed_points[plan.id] = []

        return plan.model_copy(deep=True)

    def get_plan(self, plan_id: uuid.UUID) -> Plan | None:
        """Get plan by ID."""
        plan = self._plans.get(plan_id)
        return plan.model_copy(deep=True) if plan is not None else None

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
        plans = [
            plan
            for plan in self._plans.values()
            if plan.user_id == user_id and (not statuses or plan.status in statuses)
        ]
        plans.sort(key=lambda plan: getattr(plan, sort_by), reverse=descending)
        page = plans[offset : offset + limit]
        return [plan.model_copy(deep=True) for plan in page], len(plans)

    def update_plan(self, plan_id: uuid.UUID, changes: dict[str, Any]) -> Plan:
        """Apply field changes to a plan."""
        with self._lock:
            plan = self._require_plan(plan_id)
            updated = plan.model_copy(update={**changes, "updated_at": _now()})
            self._plans[plan_id] = updated

        return updated.model_copy(deep=True)

    def update_plan_status(self, plan_id: uuid.UUID, status: PlanStatus) -> Plan:
        """Set a plan's status."""
        with self._lock:
            plan = self._require_plan(plan_id)
            updated = plan.model_copy(update={"status": status, "updated_at": _now()})
            self._plans[plan_id] = updated

        return updated.model_copy(deep=True)

    def delete_plan(self, plan_id: uuid.UUID) -> None:
        """Delete a plan with its fixed points and feedback."""
        with self._lock:
            self._plans.pop(plan_id, None)
            self._fixed_points.pop(plan_id, None)
            for key in [key for key in self._feedback if key[0] == plan_id]:
                del self._feedback[key]

    def add_fixed_point(
        self, plan_id: uuid.UUID, command: CreateFixedPointCommand
    ) -> FixedPoint:
        """Attach a fixed point to a plan."""
        fixed_point = FixedPoint(id=uuid.uuid4(), plan_id=plan_id, **command.model_dump())

        with self._lock:
            self._require_plan(plan_id)
            self._fixed_points.setdefault(plan_id, []).append(fixed_point)

        return fixed_point

    def list_fixed_points(self, plan_id: uuid.UUID) -> list[FixedPoint]:
        """List a plan's fixed points ordered by event time."""
        points = self._fixed_points.get(plan_id, [])
        return sorted(points, key=lambda fp: fp.event_at)

    def update_fixed_point(
        self, plan_id: uuid.UUID, fixed_point_id: uuid.UUID, changes: dict[str, Any]
    ) -> FixedPoint:
        """Apply field changes to one fixed point."""
        with self._lock:
            points = self._fixed_points.get(plan_id, [])
            index = self._require_fixed_point_index(points, fixed_point_id)
            points[index] = points[index].model_copy(update=changes)
            updated = points[index]

        return updated

    def delete_fixed_point(self, plan_id: uuid.UUID, fixed_point_id: uuid.UUID) -> None:
        """Remove one fixed point."""
        with self._lock:
            points = self._fixed_points.get(plan_id, [])
            del points[self._require_fixed_point_index(points, fixed_point_id)]

    def get_profile(self, user_id: uuid.UUID) -> Profile | None:
        """Get the user's profile."""
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile is not None else None

    def ensure_profile(self, user_id: uuid.UUID, generations_limit: int) -> Profile:
        """Get the user's profile, creating it if missing."""
        with self._lock:
            if user_id not in self._profiles:
                self._profiles[user_id] = Profile(
                    user_id=user_id, generations_remaining=generations_limit
                )
            profile = self._profiles[user_id]

        return profile.model_copy(deep=True)

    def update_profile(self, user_id: uuid.UUID, changes: dict[str, Any]) -> Profile:
        """Apply preference changes to a profile."""
        with self._lock:
            profile = self._profiles.get(user_id)
            if profile is None:
                raise NotFoundError("Profile not found.")
            updated = profile.model_copy(update=changes)
            self._profiles[user_id] = updated

        return updated.model_copy(deep=True)

    def commit_generation(
        self, plan_id: uuid.UUID, user_id: uuid.UUID, content: dict[str, Any]
    ) -> int:
        """Atomically store generated content and charge one generation."""
        with self._lock:
            plan = self._require_plan(plan_id)
            if plan.status == PlanStatus.archived:
                raise ConflictError("Archived plans cannot be regenerated.")

            profile = self._profiles.get(user_id)
            if profile is None or profile.generations_remaining <= 0:
                raise QuotaExceededError()

            remaining = profile.generations_remaining - 1
            self._profiles[user_id] = profile.model_copy(
                update={"generations_remaining": remaining}
            )
            self._plans[plan_id] = plan.model_copy(
                update={
                    "status": PlanStatus.generated,
                    "generated_content": copy.deepcopy(content),
                    "updated_at": _now(),
                }
            )

        return remaining

    def save_generated_content(self, plan_id: uuid.UUID, content: dict[str, Any]) -> None:
        """Replace the whole generated content document."""
        with self._lock:
            plan = self._require_plan(plan_id)
            self._plans[plan_id] = plan.model_copy(
                update={"generated_content": copy.deepcopy(content), "updated_at": _now()}
            )

    def save_feedback(
        self,
        plan_id: uuid.UUID,
        user_id: uuid.UUID,
        rating: FeedbackRating,
        comment: str | None,
    ) -> Feedback:
        """Create or replace the user's feedback on a plan."""
        feedback = Feedback(
            plan_id=plan_id, user_id=user_id, rating=rating, comment=comment, updated_at=_now()
        )
        with self._lock:
            self._require_plan(plan_id)
            self._feedback[(plan_id, user_id)] = feedback

        return feedback

    def get_feedback(self, plan_id: uuid.UUID, user_id: uuid.UUID) -> Feedback | None:
        """Get the user's feedback on a plan."""
        return self._feedback.get((plan_id, user_id))

    def _require_plan(self, plan_id: uuid.UUID) -> Plan:
        plan = self._plans.get(plan_id)
        if plan is None:
            raise NotFoundError("Plan not found.")
        return plan

    @staticmethod
    def _require_fixed_point_index(points: list[FixedPoint], fixed_point_id: uuid.UUID) -> int:
        for index, point in enumerate(points):
            if point.id == fixed_point_id:
                return index
        raise NotFoundError("Fixed point not found.")

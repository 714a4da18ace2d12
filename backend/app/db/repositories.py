"""Repository protocol interfaces for data access."""

from typing import Any, Protocol
from uuid import UUID

from backend.app.models.common import FeedbackRating, PlanStatus
from backend.app.models.feedback import Feedback
from backend.app.models.plan import (
    CreateFixedPointCommand,
    CreatePlanCommand,
    FixedPoint,
    Plan,
    Profile,
)


class PlanRepository(Protocol):
    """Repository for plans, their fixed points and the owners' profiles.

    Implementations raise DatabaseError for storage faults and never return
    partially applied writes.
    """

    def create_plan(self, user_id: UUID, command: CreatePlanCommand) -> Plan:
        """Create a new draft plan.

        Args:
            user_id: Owner of the plan
            command: Plan creation data

        Returns:
            The stored plan
        """
        ...

    def get_plan(self, plan_id: UUID) -> Plan | None:
        """Get plan by ID regardless of owner (callers enforce ownership).

        Args:
            plan_id: Plan ID

        Returns:
            Plan or None if not found
        """
        ...

    def list_plans(
        self,
        user_id: UUID,
        statuses: list[PlanStatus] | None,
        sort_by: str,
        descending: bool,
        limit: int,
        offset: int,
    ) -> tuple[list[Plan], int]:
        """List one page of a user's plans.

        Args:
            user_id: Owner of the plans
            statuses: Only plans in these statuses (all when None)
            sort_by: `created_at` or `name`
            descending: Sort direction
            limit: Page size
            offset: Number of plans to skip

        Returns:
            The page and the total number of matching plans
        """
        ...

    def update_plan(self, plan_id: UUID, changes: dict[str, Any]) -> Plan:
        """Apply field changes (name, notes, dates) to a plan.

        Raises:
            NotFoundError: If the plan does not exist
        """
        ...

    def update_plan_status(self, plan_id: UUID, status: PlanStatus) -> Plan:
        """Set a plan's status.

        Raises:
            NotFoundError: If the plan does not exist
        """
        ...

    def delete_plan(self, plan_id: UUID) -> None:
        """Delete a plan with its fixed points and feedback."""
        ...

    def add_fixed_point(self, plan_id: UUID, command: CreateFixedPointCommand) -> FixedPoint:
        """Attach a fixed point to a plan."""
        ...

    def list_fixed_points(self, plan_id: UUID) -> list[FixedPoint]:
        """List a plan's fixed points ordered by `event_at`."""
        ...

    def update_fixed_point(
        self, plan_id: UUID, fixed_point_id: UUID, changes: dict[str, Any]
    ) -> FixedPoint:
        """Apply field changes to one fixed point of a plan.

        Raises:
            NotFoundError: If the plan has no such fixed point
        """
        ...

    def delete_fixed_point(self, plan_id: UUID, fixed_point_id: UUID) -> None:
        """Remove one fixed point of a plan.

        Raises:
            NotFoundError: If the plan has no such fixed point
        """
        ...

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Get the user's profile."""
        ...

    def ensure_profile(self, user_id: UUID, generations_limit: int) -> Profile:
        """Get the user's profile, creating it with the given quota if missing."""
        ...

    def update_profile(self, user_id: UUID, changes: dict[str, Any]) -> Profile:
        """Apply preference changes to a profile. The quota is never touched here.

        Raises:
            NotFoundError: If the profile does not exist
        """
        ...

    def commit_generation(self, plan_id: UUID, user_id: UUID, content: dict[str, Any]) -> int:
        """Atomically store generated content and charge one generation.

        Decrements the user's quota only if it is above zero, stores `content`
        and sets the plan status to generated unless the plan has been archived
        meanwhile. Either everything is applied or nothing is.

        Args:
            plan_id: Plan ID
            user_id: User whose quota is charged
            content: Normalized generated content document

        Returns:
            Generations remaining after the charge

        Raises:
            QuotaExceededError: If the quota reached zero before the commit
            NotFoundError: If the plan no longer exists
            ConflictError: If the plan is archived
            DatabaseError: If the write fails
        """
        ...

    def save_generated_content(self, plan_id: UUID, content: dict[str, Any]) -> None:
        """Replace the whole generated content document of a plan.

        Raises:
            NotFoundError: If the plan does not exist
            DatabaseError: If the write fails
        """
        ...

    def save_feedback(
        self, plan_id: UUID, user_id: UUID, rating: FeedbackRating, comment: str | None
    ) -> Feedback:
        """Create or replace the user's feedback on a plan."""
        ...

    def get_feedback(self, plan_id: UUID, user_id: UUID) -> Feedback | None:
        """Get the user's feedback on a plan."""
        ...

"""Plan lifecycle service - create, list, read, edit, fixed points, archive, delete."""

import logging
from uuid import UUID

from backend.app.config import Settings, get_settings
from backend.app.db.repositories import PlanRepository
from backend.app.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from backend.app.itinerary.parser import normalize_generated_content
from backend.app.models.common import PlanStatus
from backend.app.models.plan import (
    CreateFixedPointCommand,
    CreatePlanCommand,
    FixedPoint,
    PaginatedPlans,
    Pagination,
    Plan,
    PlanDetails,
    PlanListItem,
    UpdateFixedPointCommand,
    UpdatePlanCommand,
)

logger = logging.getLogger(__name__)


def require_owned_plan(repository: PlanRepository, plan_id: UUID, user_id: UUID) -> Plan:
    """Load a plan and verify the caller owns it.

    Raises:
        NotFoundError: If the plan does not exist
        ForbiddenError: If the plan belongs to another user
    """
    plan = repository.get_plan(plan_id)
    if plan is None:
        raise NotFoundError("Plan not found.")
    if plan.user_id != user_id:
        logger.warning(f"User {user_id} attempted to access plan {plan_id} owned by another user")
        raise ForbiddenError("You do not have access to this plan.")
    return plan


class PlanService:
    """Plan lifecycle operations outside of generation and item edits."""

    def __init__(self, repository: PlanRepository, settings: Settings | None = None) -> None:
        self.repository = repository
        self.settings = settings or get_settings()

    def create_plan(self, user_id: UUID, command: CreatePlanCommand) -> Plan:
        """Create a draft plan, provisioning the user's profile on first use."""
        self.repository.ensure_profile(user_id, self.settings.default_generations_limit)
        plan = self.repository.create_plan(user_id, command)
        logger.info(f"Created draft plan {plan.id} for user {user_id}")
        return plan

    def list_plans(
        self,
        user_id: UUID,
        statuses: list[PlanStatus] | None = None,
        sort_by: str = "created_at",
        order: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> PaginatedPlans:
        """List one page of the caller's plans, newest first by default."""
        plans, total = self.repository.list_plans(
            user_id, statuses, sort_by, order == "desc", limit, offset
        )
        logger.info(f"Listed {len(plans)} of {total} plans for user {user_id}")
        return PaginatedPlans(
            data=[PlanListItem.model_validate(plan.model_dump()) for plan in plans],
            pagination=Pagination(total=total, limit=limit, offset=offset),
        )

    def get_plan_details(self, plan_id: UUID, user_id: UUID) -> PlanDetails:
        """Get a plan with its generated content re-normalized for display."""
        plan = require_owned_plan(self.repository, plan_id, user_id)

        itinerary = None
        content_error = False
        if plan.generated_content is not None:
            itinerary = normalize_generated_content(plan.generated_content)
            if itinerary is None:
                logger.error(f"Stored content of plan {plan_id} cannot be rendered")
                content_error = True

        return PlanDetails(
            id=plan.id,
            name=plan.name,
            destination=plan.destination,
            start_date=plan.start_date,
            end_date=plan.end_date,
            notes=plan.notes,
            status=plan.status,
            itinerary=itinerary,
            content_error=content_error,
            created_at=plan.created_at,
            updated_at=plan.updated_at,
        )

    def add_fixed_point(
        self, plan_id: UUID, user_id: UUID, command: CreateFixedPointCommand
    ) -> FixedPoint:
        """Attach a fixed point to a plan that is not archived."""
        self._require_editable_plan(plan_id, user_id)
        return self.repository.add_fixed_point(plan_id, command)

    def update_plan(self, plan_id: UUID, user_id: UUID, command: UpdatePlanCommand) -> Plan:
        """Edit a plan's name, notes or dates. Archived plans are read-only."""
        plan = self._require_editable_plan(plan_id, user_id)
        changes = command.model_dump(exclude_unset=True)

        start_date = changes.get("start_date", plan.start_date)
        end_date = changes.get("end_date", plan.end_date)
        if start_date is not None and end_date is not None and end_date < start_date:
            raise ValidationError("Plan end date must not be before its start date.")

        updated = self.repository.update_plan(plan_id, changes)
        logger.info(f"Updated plan {plan_id} ({', '.join(sorted(changes))})")
        return updated

    def list_fixed_points(self, plan_id: UUID, user_id: UUID) -> list[FixedPoint]:
        """List a plan's fixed points in event order."""
        require_owned_plan(self.repository, plan_id, user_id)
        return self.repository.list_fixed_points(plan_id)

    def update_fixed_point(
        self,
        plan_id: UUID,
        fixed_point_id: UUID,
        user_id: UUID,
        command: UpdateFixedPointCommand,
    ) -> FixedPoint:
        """Edit one fixed point of a plan that is not archived."""
        self._require_editable_plan(plan_id, user_id)
        return self.repository.update_fixed_point(
            plan_id, fixed_point_id, command.model_dump(exclude_unset=True)
        )

    def delete_fixed_point(self, plan_id: UUID, fixed_point_id: UUID, user_id: UUID) -> None:
        """Remove one fixed point of a plan that is not archived."""
        self._require_editable_plan(plan_id, user_id)
        self.repository.delete_fixed_point(plan_id, fixed_point_id)
        logger.info(f"Deleted fixed point {fixed_point_id} of plan {plan_id}")

    def archive_plan(self, plan_id: UUID, user_id: UUID) -> Plan:
        """Archive a generated plan. Archived plans stay readable but not editable."""
        plan = require_owned_plan(self.repository, plan_id, user_id)
        if plan.status != PlanStatus.generated:
            raise ConflictError("Only generated plans can be archived.")

        archived = self.repository.update_plan_status(plan_id, PlanStatus.archived)
        logger.info(f"Archived plan {plan_id}")
        return archived

    def delete_plan(self, plan_id: UUID, user_id: UUID) -> None:
        """Delete a plan together with its fixed points and feedback."""
        require_owned_plan(self.repository, plan_id, user_id)
        self.repository.delete_plan(plan_id)
        logger.info(f"Deleted plan {plan_id}")

    def _require_editable_plan(self, plan_id: UUID, user_id: UUID) -> Plan:
        plan = require_owned_plan(self.repository, plan_id, user_id)
        if plan.status == PlanStatus.archived:
            raise ConflictError("Archived plans cannot be edited.")
        return plan

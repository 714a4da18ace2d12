"""Plan feedback - the owner's rating of a generated itinerary."""

import logging
from uuid import UUID

from backend.app.db.repositories import PlanRepository
from backend.app.errors import ConflictError, NotFoundError
from backend.app.models.common import PlanStatus
from backend.app.models.feedback import Feedback, SubmitFeedbackCommand
from backend.app.plans.service import require_owned_plan

logger = logging.getLogger(__name__)


class FeedbackService:
    """One rating per plan and user; submitting again replaces it."""

    def __init__(self, repository: PlanRepository) -> None:
        self.repository = repository

    def submit_feedback(
        self, plan_id: UUID, user_id: UUID, command: SubmitFeedbackCommand
    ) -> tuple[Feedback, bool]:
        """Store the caller's rating of a generated or archived plan.

        Returns:
            The stored feedback and whether it replaced an earlier one

        Raises:
            ConflictError: If the plan has not been generated yet
        """
        plan = require_owned_plan(self.repository, plan_id, user_id)
        if plan.status == PlanStatus.draft:
            raise ConflictError("Only generated plans can be rated.")

        replaced = self.repository.get_feedback(plan_id, user_id) is not None
        feedback = self.repository.save_feedback(plan_id, user_id, command.rating, command.comment)
        logger.info(f"Feedback {command.rating.value} on plan {plan_id} from user {user_id}")
        return feedback, replaced

    def get_feedback(self, plan_id: UUID, user_id: UUID) -> Feedback:
        require_owned_plan(self.repository, plan_id, user_id)
        feedback = self.repository.get_feedback(plan_id, user_id)
        if feedback is None:
            raise NotFoundError("No feedback submitted for this plan.")
        return feedback

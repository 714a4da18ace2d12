"""Feedback endpoints - rating a generated plan."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_feedback_service
from backend.app.db.context import RequestContext
from backend.app.models.feedback import Feedback, SubmitFeedbackCommand
from backend.app.plans.feedback import FeedbackService

router = APIRouter(prefix="/plans/{plan_id}/feedback", tags=["feedback"])


@router.get("", response_model=Feedback)
def get_feedback(
    plan_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[FeedbackService, Depends(get_feedback_service)],
) -> Feedback:
    """Get the caller's feedback on a plan."""
    return service.get_feedback(plan_id, ctx.user_id)


@router.post("", response_model=Feedback, status_code=status.HTTP_201_CREATED)
def submit_feedback(
    plan_id: UUID,
    command: SubmitFeedbackCommand,
    response: Response,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[FeedbackService, Depends(get_feedback_service)],
) -> Feedback:
    """Rate a plan. Answers 201 for a new rating and 200 when it replaces one."""
    feedback, replaced = service.submit_feedback(plan_id, ctx.user_id, command)
    if replaced:
        response.status_code = status.HTTP_200_OK
    return feedback

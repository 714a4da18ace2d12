"""Feedback models - one rating per plan and user."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from backend.app.models.common import FeedbackRating


class Feedback(BaseModel):
    plan_id: UUID
    user_id: UUID
    rating: FeedbackRating
    comment: str | None = None
    updated_at: datetime


class SubmitFeedbackCommand(BaseModel):
    """Request body for rating a plan. Submitting again replaces the earlier rating."""

    rating: FeedbackRating
    comment: str | None = Field(default=None, max_length=2000)

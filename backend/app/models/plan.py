"""Plan models - draft plans, fixed points and user profiles."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from backend.app.models.common import PlanStatus, TravelPace
from backend.app.models.itinerary import GeneratedItinerary


class FixedPoint(BaseModel):
    """Immovable commitment the itinerary must be built around."""

    id: UUID
    plan_id: UUID
    location: str
    event_at: datetime
    event_duration: int | None = Field(default=None, gt=0)
    description: str | None = None


class Profile(BaseModel):
    """User profile holding generation quota and travel preferences."""

    user_id: UUID
    generations_remaining: int = Field(..., ge=0)
    preferences: list[str] = Field(default_factory=list)
    travel_pace: TravelPace | None = None


class Plan(BaseModel):
    """Stored plan. `generated_content` is the raw persisted JSON document."""

    id: UUID
    user_id: UUID
    name: str
    destination: str
    start_date: datetime | None
    end_date: datetime | None
    notes: str | None = None
    status: PlanStatus = PlanStatus.draft
    generated_content: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime


class PlanDetails(BaseModel):
    """Plan as returned to callers, with generated content re-normalized on read.

    `content_error` is set when the stored document cannot be rendered; the
    itinerary is then withheld rather than shown partially.
    """

    id: UUID
    name: str
    destination: str
    start_date: datetime | None
    end_date: datetime | None
    notes: str | None
    status: PlanStatus
    itinerary: GeneratedItinerary | None
    content_error: bool
    created_at: datetime
    updated_at: datetime


class CreatePlanCommand(BaseModel):
    """Request body for creating a draft plan."""

    name: str = Field(..., min_length=1, max_length=200)
    destination: str = Field(..., min_length=1, max_length=200)
    start_date: datetime
    end_date: datetime
    notes: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def validate_date_range(self) -> "CreatePlanCommand":
        """Ensure the trip does not end before it starts."""
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CreateFixedPointCommand(BaseModel):
    """Request body for adding a fixed point to a plan."""

    location: str = Field(..., min_length=1)
    event_at: datetime
    event_duration: int | None = Field(default=None, gt=0)
    description: str | None = None


class UpdatePlanCommand(BaseModel):
    """Request body for editing a plan's name, notes or dates."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    notes: str | None = Field(default=None, max_length=2000)
    start_date: datetime | None = None
    end_date: datetime | None = None

    @model_validator(mode="after")
    def validate_changes(self) -> "UpdatePlanCommand":
        """Require at least one field; name and dates can be changed but not cleared."""
        changes = self.model_dump(exclude_unset=True)
        if not changes:
            raise ValueError("at least one field must be provided")
        for field in ("name", "start_date", "end_date"):
            if field in changes and changes[field] is None:
                raise ValueError(f"{field} cannot be null")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class PlanListItem(BaseModel):
    """Plan summary shown in the plan list."""

    id: UUID
    name: str
    destination: str
    start_date: datetime | None
    end_date: datetime | None
    status: PlanStatus
    created_at: datetime


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int


class PaginatedPlans(BaseModel):
    """One page of the caller's plans."""

    data: list[PlanListItem]
    pagination: Pagination


class UpdateFixedPointCommand(BaseModel):
    """Request body for editing a fixed point. Only fields that are set are applied."""

    location: str | None = Field(default=None, min_length=1)
    event_at: datetime | None = None
    event_duration: int | None = Field(default=None, gt=0)
    description: str | None = None

    @model_validator(mode="after")
    def validate_changes(self) -> "UpdateFixedPointCommand":
        """Require at least one field; location and time can be changed but not cleared."""
        changes = self.model_dump(exclude_unset=True)
        if not changes:
            raise ValueError("at least one field must be provided")
        for field in ("location", "event_at"):
            if field in changes and changes[field] is None:
                raise ValueError(f"{field} cannot be null")
        return self


class UpdateProfileCommand(BaseModel):
    """Request body for editing the caller's travel preferences."""

    preferences: list[str] | None = Field(default=None, min_length=2, max_length=5)
    travel_pace: TravelPace | None = None

    @model_validator(mode="after")
    def validate_changes(self) -> "UpdateProfileCommand":
        """Require at least one non-null field."""
        if not self.model_dump(exclude_unset=True, exclude_none=True):
            raise ValueError("at least one field must be provided")
        return self

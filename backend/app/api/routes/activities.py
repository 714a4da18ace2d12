"""Activity endpoints - item-level edits of a generated itinerary."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_activity_service
from backend.app.db.context import RequestContext
from backend.app.itinerary.activities import ActivityService
from backend.app.models.activity import (
    AddActivityCommand,
    AddActivityResult,
    UpdateActivityCommand,
)
from backend.app.models.itinerary import GeneratedItinerary

router = APIRouter(prefix="/plans/{plan_id}/days/{date}/items", tags=["activities"])


@router.post("", response_model=AddActivityResult, status_code=status.HTTP_201_CREATED)
def add_activity(
    plan_id: UUID,
    date: str,
    command: AddActivityCommand,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ActivityService, Depends(get_activity_service)],
) -> AddActivityResult:
    """Append an activity to a day."""
    return service.add_activity(plan_id, date, command, ctx.user_id)


@router.patch("/{item_id}", response_model=GeneratedItinerary)
def update_activity(
    plan_id: UUID,
    date: str,
    item_id: str,
    command: UpdateActivityCommand,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ActivityService, Depends(get_activity_service)],
) -> GeneratedItinerary:
    """Update fields of one activity."""
    return service.update_activity(plan_id, date, item_id, command, ctx.user_id)


@router.delete("/{item_id}", response_model=GeneratedItinerary)
def delete_activity(
    plan_id: UUID,
    date: str,
    item_id: str,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ActivityService, Depends(get_activity_service)],
) -> GeneratedItinerary:
    """Remove one activity from a day."""
    return service.delete_activity(plan_id, date, item_id, ctx.user_id)

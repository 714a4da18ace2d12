"""Profile endpoints - the caller's quota and travel preferences."""

from typing import Annotated

from fastapi import APIRouter, Depends

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_profile_service
from backend.app.db.context import RequestContext
from backend.app.models.plan import Profile, UpdateProfileCommand
from backend.app.profiles.service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("", response_model=Profile)
def get_profile(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ProfileService, Depends(get_profile_service)],
) -> Profile:
    """Get the caller's profile."""
    return service.get_profile(ctx.user_id)


@router.patch("", response_model=Profile)
def update_profile(
    command: UpdateProfileCommand,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[ProfileService, Depends(get_profile_service)],
) -> Profile:
    """Update the caller's preferences or travel pace."""
    return service.update_profile(ctx.user_id, command)

"""Plan endpoints - lifecycle, listing, fixed points and itinerary generation."""

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_generation_service, get_plan_service
from backend.app.db.context import RequestContext
from backend.app.models.common import PlanStatus
from backend.app.models.itinerary import GeneratedItinerary
from backend.app.models.plan import (
    CreateFixedPointCommand,
    CreatePlanCommand,
    FixedPoint,
    PaginatedPlans,
    PlanDetails,
    UpdateFixedPointCommand,
    UpdatePlanCommand,
)
from backend.app.orchestration.generation import PlanGenerationService
from backend.app.plans.service import PlanService

router = APIRouter(prefix="/plans", tags=["plans"])


class GenerateRequest(BaseModel):
    """Optional body for POST /plans/{plan_id}/generate."""

    language: str | None = Field(None, min_length=1, max_length=50, description="Output language")


class GenerateResponse(BaseModel):
    """Response for POST /plans/{plan_id}/generate."""

    plan_id: UUID
    status: PlanStatus
    itinerary: GeneratedItinerary


@router.post("", response_model=PlanDetails, status_code=status.HTTP_201_CREATED)
def create_plan(
    command: CreatePlanCommand,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanService, Depends(get_plan_service)],
) -> PlanDetails:
    """Create a draft plan."""
    plan = service.create_plan(ctx.user_id, command)
    return service.get_plan_details(plan.id, ctx.user_id)


@router.get("", response_model=PaginatedPlans)
def list_plans(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanService, Depends(get_plan_service)],
    status_filter: Annotated[list[PlanStatus] | None, Query(alias="status")] = None,
    sort_by: Literal["created_at", "name"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> PaginatedPlans:
    """List the caller's plans, optionally filtered by status."""
    return service.list_plans(ctx.user_id, status_filter, sort_by, order, limit, offset)


@router.get("/{plan_id}", response_model=PlanDetails)
def get_plan(
    plan_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanService, Depends(get_plan_service)],
) -> PlanDetails:
    """Get a plan with its normalized itinerary."""
    return service.get_plan_details(plan_id, ctx.user_id)


@router.patch("/{plan_id}", response_model=PlanDetails)
def update_plan(
    plan_id: UUID,
    command: UpdatePlanCommand,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanService, Depends(get_plan_service)],
) -> PlanDetails:
    """Edit a plan's name, notes or dates."""
    service.update_plan(plan_id, ctx.user_id, command)
    return service.get_plan_details(plan_id, ctx.user_id)


@router.post("/{plan_id}/archive", response_model=PlanDetails)
def archive_plan(
    plan_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanService, Depends(get_plan_service)],
) -> PlanDetails:
    """Archive a generated plan."""
    service.archive_plan(plan_id, ctx.user_id)
    return service.get_plan_details(plan_id, ctx.user_id)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(
    plan_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanService, Depends(get_plan_service)],
) -> Response:
    """Delete a plan with its fixed points and feedback."""
    service.delete_plan(plan_id, ctx.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{plan_id}/fixed-points",
    response_model=FixedPoint,
    status_code=status.HTTP_201_CREATED,
)
def add_fixed_point(
    plan_id: UUID,
    command: CreateFixedPointCommand,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanService, Depends(get_plan_service)],
) -> FixedPoint:
    """Add a fixed point to a plan."""
    return service.add_fixed_point(plan_id, ctx.user_id, command)


@router.get("/{plan_id}/fixed-points", response_model=list[FixedPoint])
def list_fixed_points(
    plan_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanService, Depends(get_plan_service)],
) -> list[FixedPoint]:
    """List a plan's fixed points in event order."""
    return service.list_fixed_points(plan_id, ctx.user_id)


@router.patch("/{plan_id}/fixed-points/{fixed_point_id}", response_model=FixedPoint)
def update_fixed_point(
    plan_id: UUID,
    fixed_point_id: UUID,
    command: UpdateFixedPointCommand,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanService, Depends(get_plan_service)],
) -> FixedPoint:
    """Edit a fixed point."""
    return service.update_fixed_point(plan_id, fixed_point_id, ctx.user_id, command)


@router.delete("/{plan_id}/fixed-points/{fixed_point_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_fixed_point(
    plan_id: UUID,
    fixed_point_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanService, Depends(get_plan_service)],
) -> Response:
    """Remove a fixed point."""
    service.delete_fixed_point(plan_id, fixed_point_id, ctx.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{plan_id}/generate", response_model=GenerateResponse)
async def generate_plan(
    plan_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[PlanGenerationService, Depends(get_generation_service)],
    request: GenerateRequest | None = None,
) -> GenerateResponse:
    """Generate the itinerary for a plan, charging one generation on success."""
    itinerary = await service.generate(
        plan_id, ctx.user_id, language=request.language if request else None
    )
    return GenerateResponse(plan_id=plan_id, status=PlanStatus.generated, itinerary=itinerary)

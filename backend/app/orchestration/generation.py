"""Plan generation pipeline.

Loads a plan with its fixed points and the owner's profile, asks the model for
a structured itinerary, normalizes the reply and commits it together with the
quota charge. Any failure before the commit leaves the plan and the quota
untouched.
"""

import asyncio
import logging
import time
import weakref
from contextlib import AbstractAsyncContextManager, nullcontext
from typing import Any
from uuid import UUID, uuid4

from fastapi.concurrency import run_in_threadpool

from backend.app.config import Settings, get_settings
from backend.app.db.repositories import PlanRepository
from backend.app.errors import (
    AppError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    PlanRejectedError,
    QuotaExceededError,
    SchemaViolationError,
    ValidationError,
)
from backend.app.itinerary.parser import normalize_generated_content
from backend.app.llm.client import StructuredCompletionClient
from backend.app.llm.prompts import build_system_prompt, build_user_prompt
from backend.app.models.ai import AIGenerationResponse
from backend.app.models.common import PlanStatus, item_type_for_category
from backend.app.models.itinerary import GeneratedItinerary
from backend.app.models.plan import FixedPoint, Plan, Profile
from backend.app.plans.service import require_owned_plan
from backend.app.utils.logging import StructuredGenerationLogger
from backend.app.utils.metrics import PrometheusGenerationMetrics

logger = logging.getLogger(__name__)

# Shared across service instances so per-request services still serialize
_plan_locks: "weakref.WeakValueDictionary[UUID, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(plan_id: UUID) -> asyncio.Lock:
    lock = _plan_locks.get(plan_id)
    if lock is None:
        lock = asyncio.Lock()
        _plan_locks[plan_id] = lock
    return lock


def _outcome_for(error: AppError) -> str:
    """Map an error onto the outcome label used by metrics and logs."""
    if isinstance(error, QuotaExceededError):
        return "quota_exceeded"
    if isinstance(error, PlanRejectedError):
        return "rejected"
    if isinstance(error, SchemaViolationError):
        return "schema_violation"
    if isinstance(error, DatabaseError):
        return "database_error"
    if not error.is_operational:
        return "provider_error"
    return "ineligible"


def to_storage_format(response: AIGenerationResponse) -> dict[str, Any]:
    """Convert a successful model response into the stored content shape.

    Every item gets a fresh id; the model's `activity` becomes `title` and the
    item type is derived from the category.
    """
    if response.itinerary is None:
        raise SchemaViolationError("The AI service returned a success response without a plan.")

    days = []
    for day in response.itinerary.days:
        items = []
        for event in day.activities:
            item: dict[str, Any] = {
                "id": str(uuid4()),
                "title": event.activity,
                "type": item_type_for_category(event.category).value,
                "category": event.category.value,
                "time": event.time,
                "description": event.description,
            }
            if event.estimated_price is not None:
                item["estimated_price"] = event.estimated_price
            if event.estimated_duration is not None:
                item["estimated_duration"] = event.estimated_duration
            items.append(item)
        days.append({"date": day.date, "items": items})

    return {"summary": response.summary, "currency": response.currency, "days": days}


class PlanGenerationService:
    """Generates itineraries for draft or generated plans."""

    def __init__(
        self,
        repository: PlanRepository,
        llm_client: StructuredCompletionClient,
        settings: Settings | None = None,
        metrics: PrometheusGenerationMetrics | None = None,
        structured_logger: StructuredGenerationLogger | None = None,
    ) -> None:
        self.repository = repository
        self.llm_client = llm_client
        self.settings = settings or get_settings()
        self.metrics = metrics or PrometheusGenerationMetrics()
        self.structured_logger = structured_logger or StructuredGenerationLogger()

    async def generate(
        self, plan_id: UUID, user_id: UUID, language: str | None = None
    ) -> GeneratedItinerary:
        """Generate, validate and store an itinerary for a plan.

        Args:
            plan_id: Plan to generate
            user_id: Authenticated caller, charged one generation on success
            language: Output language (settings default when omitted)

        Returns:
            The normalized itinerary that was stored

        Raises:
            NotFoundError: Plan or profile missing
            ForbiddenError: Plan owned by another user
            ConflictError: Plan is archived, or was archived before the commit
            QuotaExceededError: No generations remaining
            ValidationError: Plan dates missing or inverted
            PlanRejectedError: Model refused the plan
            ExternalServiceError: Provider failure or invalid reply
            DatabaseError: Commit failed (nothing charged)
        """
        guard: AbstractAsyncContextManager[Any] = (
            _lock_for(plan_id) if self.settings.serialize_generation_per_plan else nullcontext()
        )

        start = time.perf_counter()
        async with guard:
            try:
                itinerary, remaining = await self._generate(plan_id, user_id, language)
            except AppError as e:
                outcome = _outcome_for(e)
                self.metrics.inc_generation(outcome)
                self.structured_logger.log_outcome(
                    plan_id,
                    user_id,
                    outcome,
                    (time.perf_counter() - start) * 1000,
                    error_reason=e.message,
                )
                raise

        self.metrics.inc_generation("success")
        self.structured_logger.log_outcome(
            plan_id,
            user_id,
            "success",
            (time.perf_counter() - start) * 1000,
            remaining=remaining,
        )
        return itinerary

    async def _generate(
        self, plan_id: UUID, user_id: UUID, language: str | None
    ) -> tuple[GeneratedItinerary, int]:
        # Repository calls block, so they run off the event loop
        plan, profile, fixed_points = await run_in_threadpool(
            self._load_inputs, plan_id, user_id
        )
        system_prompt = build_system_prompt(language or self.settings.generation_language)
        user_prompt = build_user_prompt(plan, fixed_points, profile)

        logger.info(
            f"Generating plan {plan_id} for {plan.destination} "
            f"({len(fixed_points)} fixed points)"
        )

        response = await self.llm_client.complete_structured(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            response_model=AIGenerationResponse,
            model=self.settings.openrouter_model,
        )

        if response.status == "error":
            logger.info(f"Model rejected plan {plan_id}: {response.error_type}")
            raise PlanRejectedError(
                response.error_message or "The plan cannot be generated.",
                response.error_type or "unrealistic_plan",
            )

        itinerary = normalize_generated_content(to_storage_format(response))
        if itinerary is None:
            logger.error(f"Generated content for plan {plan_id} failed normalization")
            raise SchemaViolationError(
                "The AI service returned a plan that cannot be displayed."
            )

        remaining = await run_in_threadpool(
            self.repository.commit_generation, plan_id, user_id, itinerary.to_storage()
        )
        return itinerary, remaining

    def _load_inputs(
        self, plan_id: UUID, user_id: UUID
    ) -> tuple[Plan, Profile, list[FixedPoint]]:
        plan = require_owned_plan(self.repository, plan_id, user_id)
        if plan.status == PlanStatus.archived:
            raise ConflictError("Archived plans cannot be regenerated.")

        profile = self._check_quota(user_id)
        self._check_dates(plan)

        fixed_points = sorted(self.repository.list_fixed_points(plan_id), key=lambda fp: fp.event_at)
        return plan, profile, fixed_points

    def _check_quota(self, user_id: UUID) -> Profile:
        profile = self.repository.get_profile(user_id)
        if profile is None:
            raise NotFoundError("User profile not found.")
        if profile.generations_remaining <= 0:
            raise QuotaExceededError()
        return profile

    def _check_dates(self, plan: Plan) -> None:
        if plan.start_date is None or plan.end_date is None:
            raise ValidationError("Plan must have both start and end dates before generation.")
        if plan.end_date < plan.start_date:
            raise ValidationError("Plan end date must not be before its start date.")

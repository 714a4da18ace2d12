"""FastAPI dependencies wiring repositories, the LLM client and services."""

from collections.abc import Generator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from backend.app.config import get_settings
from backend.app.db.engine import get_session_factory
from backend.app.db.inmemory import InMemoryPlanRepository
from backend.app.db.repositories import PlanRepository
from backend.app.db.sql_repositories import SqlPlanRepository
from backend.app.itinerary.activities import ActivityService
from backend.app.llm.client import StructuredCompletionClient, get_llm_client
from backend.app.orchestration.generation import PlanGenerationService
from backend.app.plans.feedback import FeedbackService
from backend.app.plans.service import PlanService
from backend.app.profiles.service import ProfileService

# Used when no DATABASE_URL is configured (local runs)
_inmemory_repository = InMemoryPlanRepository()


def get_repository() -> Generator[PlanRepository, None, None]:
    """Yield a SQL repository bound to a request session, or the in-memory one."""
    if not get_settings().database_url:
        yield _inmemory_repository
        return

    with get_session_factory()() as session:
        yield SqlPlanRepository(session)


@lru_cache
def get_completion_client() -> StructuredCompletionClient:
    """Process-wide structured completion client."""
    return get_llm_client()


def get_plan_service(
    repository: Annotated[PlanRepository, Depends(get_repository)],
) -> PlanService:
    return PlanService(repository)


def get_generation_service(
    repository: Annotated[PlanRepository, Depends(get_repository)],
    llm_client: Annotated[StructuredCompletionClient, Depends(get_completion_client)],
) -> PlanGenerationService:
    return PlanGenerationService(repository, llm_client)


def get_activity_service(
    repository: Annotated[PlanRepository, Depends(get_repository)],
) -> ActivityService:
    return ActivityService(repository)


def get_profile_service(
    repository: Annotated[PlanRepository, Depends(get_repository)],
) -> ProfileService:
    return ProfileService(repository)


def get_feedback_service(
    repository: Annotated[PlanRepository, Depends(get_repository)],
) -> FeedbackService:
    return FeedbackService(repository)

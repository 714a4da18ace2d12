"""Shared pytest fixtures for all test suites."""

import uuid
from collections.abc import Generator
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app.config import Settings
from backend.app.db.inmemory import InMemoryPlanRepository
from backend.app.db.models import Base
from backend.app.db.sql_repositories import SqlPlanRepository
from backend.app.models.ai import AIGenerationResponse
from backend.app.models.common import PlanStatus
from backend.app.models.plan import CreatePlanCommand, Plan

USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")


@pytest.fixture
def settings() -> Settings:
    """Settings with a fake provider key and no database."""
    return Settings(
        database_url=None,
        openrouter_api_key="test-key",
        default_generations_limit=5,
    )


@pytest.fixture
def user_id() -> uuid.UUID:
    return USER_ID


@pytest.fixture
def repository() -> InMemoryPlanRepository:
    """Fresh in-memory repository."""
    return InMemoryPlanRepository()


@pytest.fixture
def sqlite_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared across threads, with FK enforcement."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection: Any, _: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Generator[Session, None, None]:
    """Session bound to the SQLite engine."""
    factory = sessionmaker(bind=sqlite_engine, expire_on_commit=False)
    with factory() as session:
        yield session


@pytest.fixture
def sql_repository(sqlite_session: Session) -> SqlPlanRepository:
    return SqlPlanRepository(sqlite_session)


@pytest.fixture
def plan_command() -> CreatePlanCommand:
    """Three-day trip to Kraków."""
    return CreatePlanCommand(
        name="Weekend in Kraków",
        destination="Kraków, Poland",
        start_date=datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc),
        end_date=datetime(2025, 6, 3, 18, 0, tzinfo=timezone.utc),
        notes="Love old towns and local food",
    )


@pytest.fixture
def draft_plan(
    repository: InMemoryPlanRepository, plan_command: CreatePlanCommand, user_id: uuid.UUID
) -> Plan:
    """Draft plan owned by USER_ID, whose profile has 5 generations left."""
    repository.ensure_profile(user_id, 5)
    return repository.create_plan(user_id, plan_command)


@pytest.fixture
def generated_content() -> dict[str, Any]:
    """Stored content of a generated plan: one day with a single museum visit."""
    return {
        "summary": "A relaxed trip through Kraków's old town.",
        "currency": "PLN",
        "days": [
            {
                "date": "2025-06-01",
                "items": [
                    {
                        "id": "a1",
                        "title": "Museum",
                        "time": "10:00",
                        "category": "museums",
                        "estimated_price": "40",
                    }
                ],
            },
            {"date": "2025-06-02", "items": []},
        ],
    }


@pytest.fixture
def generated_plan(
    repository: InMemoryPlanRepository,
    draft_plan: Plan,
    generated_content: dict[str, Any],
    user_id: uuid.UUID,
) -> Plan:
    """Plan in generated status holding `generated_content`."""
    repository.commit_generation(draft_plan.id, user_id, generated_content)
    plan = repository.get_plan(draft_plan.id)
    assert plan is not None and plan.status == PlanStatus.generated
    return plan


@pytest.fixture
def success_response() -> AIGenerationResponse:
    """Successful model reply with two days."""
    return AIGenerationResponse.model_validate(
        {
            "status": "success",
            "summary": "Two days of history and pierogi.",
            "currency": "PLN",
            "itinerary": {
                "destination": "Kraków, Poland",
                "dates": {"start": "2025-06-01", "end": "2025-06-02"},
                "days": [
                    {
                        "date": "2025-06-01",
                        "activities": [
                            {
                                "time": "09:00",
                                "activity": "Wawel Castle",
                                "category": "history",
                                "description": "Royal castle on Wawel Hill.",
                                "estimated_price": "35",
                                "estimated_duration": "2 hours",
                            },
                            {
                                "time": "13:00",
                                "activity": "Lunch at a milk bar",
                                "category": "food",
                                "description": "Traditional Polish food.",
                                "estimated_price": "30",
                                "estimated_duration": None,
                            },
                        ],
                    },
                    {
                        "date": "2025-06-02",
                        "activities": [
                            {
                                "time": "10:00",
                                "activity": "Tram to Nowa Huta",
                                "category": "transport",
                                "description": "Ride tram 4 east.",
                                "estimated_price": None,
                                "estimated_duration": "30 minutes",
                            }
                        ],
                    },
                ],
            },
            "error_type": None,
            "error_message": None,
        }
    )


@pytest.fixture
def llm_client(success_response: AIGenerationResponse) -> AsyncMock:
    """Structured completion client returning `success_response`."""
    client = AsyncMock()
    client.complete_structured.return_value = success_response
    return client

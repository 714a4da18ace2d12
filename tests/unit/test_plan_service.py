"""Unit tests for the plan lifecycle service."""

import uuid
from datetime import datetime, timezone

import pytest

from backend.app.config import Settings
from backend.app.db.inmemory import InMemoryPlanRepository
from backend.app.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from backend.app.models.common import PlanStatus
from backend.app.models.plan import (
    CreateFixedPointCommand,
    CreatePlanCommand,
    Plan,
    UpdateFixedPointCommand,
    UpdatePlanCommand,
)
from backend.app.plans.service import PlanService


@pytest.fixture
def service(repository: InMemoryPlanRepository, settings: Settings) -> PlanService:
    return PlanService(repository, settings=settings)


def _fixed_point(day: int, hour: int, location: str) -> CreateFixedPointCommand:
    return CreateFixedPointCommand(
        location=location,
        event_at=datetime(2025, 6, day, hour, tzinfo=timezone.utc),
        event_duration=60,
    )


def test_create_plan_provisions_profile(
    service: PlanService,
    repository: InMemoryPlanRepository,
    plan_command: CreatePlanCommand,
) -> None:
    user_id = uuid.uuid4()

    plan = service.create_plan(user_id, plan_command)

    assert plan.status == PlanStatus.draft
    assert plan.generated_content is None
    profile = repository.get_profile(user_id)
    assert profile is not None
    assert profile.generations_remaining == 5


def test_create_plan_keeps_existing_quota(
    service: PlanService,
    repository: InMemoryPlanRepository,
    plan_command: CreatePlanCommand,
) -> None:
    user_id = uuid.uuid4()
    repository.ensure_profile(user_id, 1)

    service.create_plan(user_id, plan_command)

    assert repository.get_profile(user_id).generations_remaining == 1  # type: ignore[union-attr]


def test_details_of_draft(service: PlanService, draft_plan: Plan, user_id: uuid.UUID) -> None:
    details = service.get_plan_details(draft_plan.id, user_id)

    assert details.itinerary is None
    assert details.content_error is False
    assert details.destination == "Kraków, Poland"


def test_details_renormalize_content(
    service: PlanService, generated_plan: Plan, user_id: uuid.UUID
) -> None:
    details = service.get_plan_details(generated_plan.id, user_id)

    assert details.content_error is False
    assert details.itinerary is not None
    assert details.itinerary.days[0].items[0].category.value == "other"


def test_details_flag_unrenderable_content(
    service: PlanService,
    repository: InMemoryPlanRepository,
    generated_plan: Plan,
    user_id: uuid.UUID,
) -> None:
    repository.save_generated_content(generated_plan.id, {"summary": "no days"})

    details = service.get_plan_details(generated_plan.id, user_id)

    assert details.itinerary is None
    assert details.content_error is True
    assert details.status == PlanStatus.generated


def test_details_of_foreign_plan(service: PlanService, draft_plan: Plan) -> None:
    with pytest.raises(ForbiddenError):
        service.get_plan_details(draft_plan.id, uuid.uuid4())


def test_details_of_missing_plan(service: PlanService, user_id: uuid.UUID) -> None:
    with pytest.raises(NotFoundError):
        service.get_plan_details(uuid.uuid4(), user_id)


def test_fixed_points_listed_in_event_order(
    service: PlanService, draft_plan: Plan, user_id: uuid.UUID
) -> None:
    service.add_fixed_point(draft_plan.id, user_id, _fixed_point(2, 19, "Philharmonic"))
    service.add_fixed_point(draft_plan.id, user_id, _fixed_point(1, 11, "Salt mine tour"))

    points = service.list_fixed_points(draft_plan.id, user_id)

    assert [p.location for p in points] == ["Salt mine tour", "Philharmonic"]
    assert all(p.plan_id == draft_plan.id for p in points)


def test_fixed_point_on_archived_plan_conflict(
    service: PlanService, generated_plan: Plan, user_id: uuid.UUID
) -> None:
    service.archive_plan(generated_plan.id, user_id)

    with pytest.raises(ConflictError):
        service.add_fixed_point(generated_plan.id, user_id, _fixed_point(1, 9, "Museum"))


def test_archive_generated_plan(
    service: PlanService, generated_plan: Plan, user_id: uuid.UUID
) -> None:
    archived = service.archive_plan(generated_plan.id, user_id)

    assert archived.status == PlanStatus.archived
    details = service.get_plan_details(generated_plan.id, user_id)
    assert details.itinerary is not None


def test_archive_draft_conflict(service: PlanService, draft_plan: Plan, user_id: uuid.UUID) -> None:
    with pytest.raises(ConflictError):
        service.archive_plan(draft_plan.id, user_id)


def test_archive_twice_conflict(
    service: PlanService, generated_plan: Plan, user_id: uuid.UUID
) -> None:
    service.archive_plan(generated_plan.id, user_id)

    with pytest.raises(ConflictError):
        service.archive_plan(generated_plan.id, user_id)


def test_delete_plan_cascades(
    service: PlanService,
    repository: InMemoryPlanRepository,
    draft_plan: Plan,
    user_id: uuid.UUID,
) -> None:
    service.add_fixed_point(draft_plan.id, user_id, _fixed_point(1, 9, "Museum"))

    service.delete_plan(draft_plan.id, user_id)

    assert repository.get_plan(draft_plan.id) is None
    assert repository.list_fixed_points(draft_plan.id) == []


def test_delete_foreign_plan_forbidden(
    service: PlanService, repository: InMemoryPlanRepository, draft_plan: Plan
) -> None:
    with pytest.raises(ForbiddenError):
        service.delete_plan(draft_plan.id, uuid.uuid4())

    assert repository.get_plan(draft_plan.id) is not None


def _create(service: PlanService, user_id: uuid.UUID, plan_command: CreatePlanCommand, name: str) -> Plan:
    return service.create_plan(user_id, plan_command.model_copy(update={"name": name}))


def test_list_plans_paginates_by_name(
    service: PlanService, plan_command: CreatePlanCommand, user_id: uuid.UUID
) -> None:
    for name in ["Bergen", "Athens", "Cusco"]:
        _create(service, user_id, plan_command, name)
    _create(service, uuid.uuid4(), plan_command, "Someone else's trip")

    page = service.list_plans(user_id, sort_by="name", order="asc", limit=2, offset=1)

    assert [plan.name for plan in page.data] == ["Bergen", "Cusco"]
    assert page.pagination.model_dump() == {"total": 3, "limit": 2, "offset": 1}


def test_list_plans_filters_by_status(
    service: PlanService,
    plan_command: CreatePlanCommand,
    generated_plan: Plan,
    user_id: uuid.UUID,
) -> None:
    _create(service, user_id, plan_command, "Another draft")

    page = service.list_plans(user_id, statuses=[PlanStatus.generated])

    assert [plan.id for plan in page.data] == [generated_plan.id]
    assert page.pagination.total == 1


def test_list_plans_offset_past_end(service: PlanService, draft_plan: Plan, user_id: uuid.UUID) -> None:
    page = service.list_plans(user_id, offset=10)

    assert page.data == []
    assert page.pagination.total == 1


def test_update_plan(service: PlanService, draft_plan: Plan, user_id: uuid.UUID) -> None:
    updated = service.update_plan(
        draft_plan.id, user_id, UpdatePlanCommand(name="Long weekend", notes=None)
    )

    assert updated.name == "Long weekend"
    assert updated.notes is None
    assert updated.destination == draft_plan.destination
    assert updated.updated_at >= draft_plan.updated_at


def test_update_plan_end_before_stored_start(
    service: PlanService, draft_plan: Plan, user_id: uuid.UUID
) -> None:
    command = UpdatePlanCommand(end_date=datetime(2025, 5, 1, tzinfo=timezone.utc))

    with pytest.raises(ValidationError):
        service.update_plan(draft_plan.id, user_id, command)


def test_update_archived_plan_conflict(
    service: PlanService, generated_plan: Plan, user_id: uuid.UUID
) -> None:
    service.archive_plan(generated_plan.id, user_id)

    with pytest.raises(ConflictError):
        service.update_plan(generated_plan.id, user_id, UpdatePlanCommand(name="Renamed"))


def test_update_foreign_plan_forbidden(service: PlanService, draft_plan: Plan) -> None:
    with pytest.raises(ForbiddenError):
        service.update_plan(draft_plan.id, uuid.uuid4(), UpdatePlanCommand(name="Mine now"))


def test_update_and_delete_fixed_point(
    service: PlanService, draft_plan: Plan, user_id: uuid.UUID
) -> None:
    point = service.add_fixed_point(draft_plan.id, user_id, _fixed_point(1, 11, "Salt mine tour"))

    updated = service.update_fixed_point(
        draft_plan.id, point.id, user_id, UpdateFixedPointCommand(event_duration=180, description=None)
    )

    assert updated.id == point.id
    assert updated.event_duration == 180
    assert updated.location == "Salt mine tour"

    service.delete_fixed_point(draft_plan.id, point.id, user_id)

    assert service.list_fixed_points(draft_plan.id, user_id) == []


def test_fixed_point_of_another_plan_not_found(
    service: PlanService,
    plan_command: CreatePlanCommand,
    draft_plan: Plan,
    user_id: uuid.UUID,
) -> None:
    other = _create(service, user_id, plan_command, "Other trip")
    point = service.add_fixed_point(other.id, user_id, _fixed_point(1, 9, "Museum"))

    with pytest.raises(NotFoundError):
        service.update_fixed_point(
            draft_plan.id, point.id, user_id, UpdateFixedPointCommand(location="Castle")
        )
    with pytest.raises(NotFoundError):
        service.delete_fixed_point(draft_plan.id, uuid.uuid4(), user_id)


def test_fixed_point_edits_on_archived_plan_conflict(
    service: PlanService,
    repository: InMemoryPlanRepository,
    generated_plan: Plan,
    user_id: uuid.UUID,
) -> None:
    point = service.add_fixed_point(generated_plan.id, user_id, _fixed_point(1, 9, "Museum"))
    service.archive_plan(generated_plan.id, user_id)

    with pytest.raises(ConflictError):
        service.update_fixed_point(
            generated_plan.id, point.id, user_id, UpdateFixedPointCommand(location="Castle")
        )
    with pytest.raises(ConflictError):
        service.delete_fixed_point(generated_plan.id, point.id, user_id)

    assert [p.location for p in repository.list_fixed_points(generated_plan.id)] == ["Museum"]

"""Item-level edits of a generated itinerary.

Each operation reads the stored document, normalizes it, changes one item of
one day and writes the whole document back. Concurrent edits are last writer
wins.
"""

import logging
from typing import Any
from uuid import UUID, uuid4

from backend.app.db.repositories import PlanRepository
from backend.app.errors import ConflictError, DatabaseError, NotFoundError
from backend.app.itinerary.parser import normalize_generated_content
from backend.app.models.activity import (
    AddActivityCommand,
    AddActivityResult,
    UpdateActivityCommand,
)
from backend.app.models.common import PlanStatus, item_type_for_category
from backend.app.models.itinerary import DayPlan, GeneratedItinerary, TimelineItem
from backend.app.plans.service import require_owned_plan
from backend.app.utils.metrics import PrometheusGenerationMetrics

logger = logging.getLogger(__name__)


def _duration_text(minutes: int | None) -> str | None:
    return f"{minutes} min" if minutes is not None else None


def _new_item_id(existing: set[str]) -> str:
    while True:
        candidate = str(uuid4())
        if candidate not in existing:
            return candidate


class ActivityService:
    """Adds, updates and removes single activities of a generated plan."""

    def __init__(
        self,
        repository: PlanRepository,
        metrics: PrometheusGenerationMetrics | None = None,
    ) -> None:
        self.repository = repository
        self.metrics = metrics or PrometheusGenerationMetrics()

    def add_activity(
        self, plan_id: UUID, date: str, command: AddActivityCommand, user_id: UUID
    ) -> AddActivityResult:
        """Append a new activity to the given day."""
        itinerary = self._load_itinerary(plan_id, user_id)
        day = self._require_day(itinerary, date)

        item = TimelineItem(
            id=_new_item_id(itinerary.item_ids()),
            title=command.title,
            type=item_type_for_category(command.category),
            category=command.category,
            time=command.time,
            location=command.location,
            description=command.description,
            estimated_price=command.estimated_cost,
            estimated_duration=_duration_text(command.duration),
        )
        day.items.append(item)

        self._save(plan_id, itinerary, "add")
        logger.info(f"Added activity {item.id} to plan {plan_id} on {date}")
        return AddActivityResult(item=item, itinerary=itinerary)

    def update_activity(
        self,
        plan_id: UUID,
        date: str,
        item_id: str,
        command: UpdateActivityCommand,
        user_id: UUID,
    ) -> GeneratedItinerary:
        """Apply the fields present in `command` to one activity of the given day."""
        itinerary = self._load_itinerary(plan_id, user_id)
        day = self._require_day(itinerary, date)
        index = self._require_item_index(day, item_id, date)

        changes = command.changes()
        updates: dict[str, Any] = {}

        if "title" in changes:
            updates["title"] = changes["title"]
        if "category" in changes:
            updates["category"] = command.category
            updates["type"] = item_type_for_category(command.category)
        for field in ("time", "location", "description"):
            if field in changes:
                updates[field] = changes[field]
        if "duration" in changes:
            updates["estimated_duration"] = _duration_text(changes["duration"])
        if "estimated_cost" in changes:
            updates["estimated_price"] = changes["estimated_cost"]

        day.items[index] = day.items[index].model_copy(update=updates)

        self._save(plan_id, itinerary, "update")
        logger.info(f"Updated activity {item_id} of plan {plan_id} ({', '.join(sorted(updates))})")
        return itinerary

    def delete_activity(
        self, plan_id: UUID, date: str, item_id: str, user_id: UUID
    ) -> GeneratedItinerary:
        """Remove one activity from the given day."""
        itinerary = self._load_itinerary(plan_id, user_id)
        day = self._require_day(itinerary, date)
        index = self._require_item_index(day, item_id, date)

        del day.items[index]

        self._save(plan_id, itinerary, "delete")
        logger.info(f"Deleted activity {item_id} from plan {plan_id} on {date}")
        return itinerary

    def _load_itinerary(self, plan_id: UUID, user_id: UUID) -> GeneratedItinerary:
        plan = require_owned_plan(self.repository, plan_id, user_id)
        if plan.status != PlanStatus.generated:
            raise ConflictError("Activities can only be edited on generated plans.")

        itinerary = normalize_generated_content(plan.generated_content)
        if itinerary is None:
            logger.error(f"Stored content of plan {plan_id} is not a valid itinerary")
            raise DatabaseError("Stored plan content is invalid and cannot be edited.")
        return itinerary

    def _require_day(self, itinerary: GeneratedItinerary, date: str) -> DayPlan:
        day = itinerary.find_day(date)
        if day is None:
            raise NotFoundError(f"Day {date} not found in plan.")
        return day

    def _require_item_index(self, day: DayPlan, item_id: str, date: str) -> int:
        for index, item in enumerate(day.items):
            if item.id == item_id:
                return index
        raise NotFoundError(f"Activity {item_id} not found on {date}.")

    def _save(self, plan_id: UUID, itinerary: GeneratedItinerary, operation: str) -> None:
        self.repository.save_generated_content(plan_id, itinerary.to_storage())
        self.metrics.inc_activity_mutation(operation)

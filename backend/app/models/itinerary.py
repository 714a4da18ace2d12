"""Itinerary models - normalized generated content for rendering and editing."""

from typing import Any

from pydantic import BaseModel

from backend.app.models.common import TimelineItemCategory, TimelineItemType


class TimelineItem(BaseModel):
    """Single entry on a day's timeline."""

    id: str
    title: str
    type: TimelineItemType = TimelineItemType.activity
    category: TimelineItemCategory = TimelineItemCategory.other
    time: str | None = None
    location: str | None = None
    description: str | None = None
    notes: str | None = None
    estimated_price: str | None = None
    estimated_duration: str | None = None


class DayPlan(BaseModel):
    """Timeline for a single day. `date` is compared by exact string equality."""

    date: str
    items: list[TimelineItem]


class GeneratedItinerary(BaseModel):
    """Complete generated itinerary as stored in `plan.generated_content`."""

    summary: str
    currency: str
    days: list[DayPlan]
    modifications: list[str] | None = None
    warnings: list[str] | None = None

    def find_day(self, date: str) -> DayPlan | None:
        """Return the day whose date matches exactly, if any."""
        for day in self.days:
            if day.date == date:
                return day
        return None

    def item_ids(self) -> set[str]:
        """All item ids across every day."""
        return {item.id for day in self.days for item in day.items}

    def to_storage(self) -> dict[str, Any]:
        """Serialize to the JSON document persisted in `generated_content`."""
        return self.model_dump(mode="json", exclude_none=True)

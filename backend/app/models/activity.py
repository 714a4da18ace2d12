"""Activity commands - item-level edits of a generated itinerary."""

from pydantic import BaseModel, Field, model_validator

from backend.app.models.common import TimelineItemCategory
from backend.app.models.itinerary import GeneratedItinerary, TimelineItem

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# Item fields a patch may change but never clear
REQUIRED_ITEM_FIELDS = frozenset({"title", "category"})


class AddActivityCommand(BaseModel):
    """Request body for adding an activity to a day."""

    title: str = Field(..., min_length=1, max_length=200)
    category: TimelineItemCategory
    time: str | None = Field(default=None, pattern=TIME_PATTERN)
    location: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    duration: int | None = Field(default=None, gt=0)
    estimated_cost: str | None = Field(default=None, max_length=50)


class UpdateActivityCommand(BaseModel):
    """Request body for patching an activity. Only fields that are set are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    category: TimelineItemCategory | None = None
    time: str | None = Field(default=None, pattern=TIME_PATTERN)
    location: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    duration: int | None = Field(default=None, gt=0)
    estimated_cost: str | None = Field(default=None, max_length=50)

    @model_validator(mode="after")
    def validate_not_empty(self) -> "UpdateActivityCommand":
        """Reject patches that change nothing.

        `title` and `category` cannot be cleared, so a null for either does
        not count as a change.
        """
        if not self.changes():
            raise ValueError("at least one field must be provided")
        return self

    def changes(self) -> dict[str, object]:
        """Fields to apply, with nulls for required item fields dropped."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key not in REQUIRED_ITEM_FIELDS
        }


class AddActivityResult(BaseModel):
    """Outcome of adding an activity: the new item and the itinerary it landed in."""

    item: TimelineItem
    itinerary: GeneratedItinerary

"""Response contract requested from the LLM for plan generation.

The schema is closed (no extra keys) and every property is required, with
optional values expressed as nullable. That is the shape providers accept for
strict structured output. The success and error variants share one object so
the root stays a plain object; `check_status_fields` enforces which fields each
variant needs.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from backend.app.models.common import TimelineItemCategory

CATEGORY_VALUES = frozenset(c.value for c in TimelineItemCategory)


class AIModel(BaseModel):
    """Base for provider-facing models: unknown keys are a schema violation."""

    model_config = ConfigDict(extra="forbid")


class AITimelineEvent(AIModel):
    """One activity as produced by the model."""

    time: str = Field(..., description="Time of the event in 24-hour HH:mm format (e.g. 18:00).")
    activity: str = Field(..., description="A short, descriptive title for the activity.")
    category: TimelineItemCategory = Field(..., description="The category of the activity.")
    description: str = Field(..., description="A detailed description of the activity.")
    estimated_price: str | None = Field(
        ...,
        description="Estimated cost as a numeric string without currency symbol ('18', '0' for free), or null.",
    )
    estimated_duration: str | None = Field(
        ..., description="Estimated duration (e.g. '2 hours', '30 minutes'), or null."
    )

    @field_validator("category", mode="before")
    @classmethod
    def coerce_unknown_category(cls, v: Any) -> Any:
        """Map category words outside the closed set to `other`."""
        if isinstance(v, TimelineItemCategory):
            return v
        if isinstance(v, str) and v in CATEGORY_VALUES:
            return v
        return TimelineItemCategory.other


class AIDayPlan(AIModel):
    """Activities for one day."""

    date: str = Field(..., description="The date for this day's plan in YYYY-MM-DD format.")
    activities: list[AITimelineEvent] = Field(..., description="Activities for the day.")


class AIDates(AIModel):
    """Trip date range echoed back by the model."""

    start: str
    end: str


class AIItinerary(AIModel):
    """Itinerary body of a successful generation."""

    destination: str
    dates: AIDates
    days: list[AIDayPlan] = Field(..., description="One entry per day of the trip.")


class AIGenerationResponse(AIModel):
    """Top-level generation response: either a plan or a reasoned refusal."""

    status: Literal["success", "error"]
    summary: str | None = Field(
        ..., description="A brief, engaging summary of the whole trip. Null when status is error."
    )
    currency: str | None = Field(
        ..., description="ISO 4217 code for all prices (e.g. EUR, PLN, USD). Null when status is error."
    )
    itinerary: AIItinerary | None = Field(..., description="The plan. Null when status is error.")
    error_type: Literal["unrealistic_plan", "invalid_location"] | None = Field(
        ..., description="Why the plan cannot be generated. Null when status is success."
    )
    error_message: str | None = Field(
        ..., description="User-friendly explanation of the error. Null when status is success."
    )

    @model_validator(mode="after")
    def check_status_fields(self) -> "AIGenerationResponse":
        """Ensure the fields required by the chosen variant are present."""
        if self.status == "success":
            if self.summary is None or self.currency is None or self.itinerary is None:
                raise ValueError("success response requires summary, currency and itinerary")
            if len(self.currency) != 3:
                raise ValueError(f"currency must be a 3-letter code, got {self.currency!r}")
        elif self.error_type is None or not self.error_message:
            raise ValueError("error response requires error_type and error_message")
        return self

"""Models package - re-exports for convenience."""

from backend.app.models.activity import (
    AddActivityCommand,
    AddActivityResult,
    UpdateActivityCommand,
)
from backend.app.models.ai import (
    AIDayPlan,
    AIDates,
    AIGenerationResponse,
    AIItinerary,
    AITimelineEvent,
)
from backend.app.models.common import (
    FeedbackRating,
    PlanStatus,
    TimelineItemCategory,
    TimelineItemType,
    TravelPace,
    item_type_for_category,
)
from backend.app.models.feedback import Feedback, SubmitFeedbackCommand
from backend.app.models.itinerary import DayPlan, GeneratedItinerary, TimelineItem
from backend.app.models.plan import (
    CreateFixedPointCommand,
    CreatePlanCommand,
    FixedPoint,
    PaginatedPlans,
    Pagination,
    Plan,
    PlanDetails,
    PlanListItem,
    Profile,
    UpdateFixedPointCommand,
    UpdatePlanCommand,
    UpdateProfileCommand,
)

__all__ = [
    # Common
    "PlanStatus",
    "TravelPace",
    "FeedbackRating",
    "TimelineItemType",
    "TimelineItemCategory",
    "item_type_for_category",
    # Itinerary
    "GeneratedItinerary",
    "DayPlan",
    "TimelineItem",
    # Plan
    "Plan",
    "PlanDetails",
    "FixedPoint",
    "Profile",
    "PlanListItem",
    "Pagination",
    "PaginatedPlans",
    "CreatePlanCommand",
    "UpdatePlanCommand",
    "CreateFixedPointCommand",
    "UpdateFixedPointCommand",
    "UpdateProfileCommand",
    # Feedback
    "Feedback",
    "SubmitFeedbackCommand",
    # Activity
    "AddActivityCommand",
    "AddActivityResult",
    "UpdateActivityCommand",
    # AI contract
    "AIGenerationResponse",
    "AIItinerary",
    "AIDates",
    "AIDayPlan",
    "AITimelineEvent",
]

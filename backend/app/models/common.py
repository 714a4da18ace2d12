"""Common types and enums shared across all models."""

from enum import Enum


class PlanStatus(str, Enum):
    """Plan lifecycle status."""

    draft = "draft"
    generated = "generated"
    archived = "archived"


class TravelPace(str, Enum):
    """Desired pace of travel stored on the user profile."""

    slow = "slow"
    moderate = "moderate"
    intensive = "intensive"


class TimelineItemType(str, Enum):
    """Kind of timeline entry."""

    activity = "activity"
    meal = "meal"
    transport = "transport"


class TimelineItemCategory(str, Enum):
    """Activity category shown on the timeline."""

    history = "history"
    food = "food"
    sport = "sport"
    nature = "nature"
    culture = "culture"
    transport = "transport"
    accommodation = "accommodation"
    other = "other"


def item_type_for_category(category: TimelineItemCategory) -> TimelineItemType:
    """Derive the timeline item type from its category.

    Food entries are meals, transport entries are transport, everything else
    is a plain activity.
    """
    if category == TimelineItemCategory.food:
        return TimelineItemType.meal
    if category == TimelineItemCategory.transport:
        return TimelineItemType.transport
    return TimelineItemType.activity


class FeedbackRating(str, Enum):
    """Owner's verdict on a generated plan."""

    thumbs_up = "thumbs_up"
    thumbs_down = "thumbs_down"

"""Generated content parser.

Converts the untrusted `generated_content` JSON (fresh from the model or read
back from storage, possibly written by an older schema) into a
GeneratedItinerary.

Structure is strict: a missing or mistyped `days`, day `date`/`items`, or item
`id`/`title` rejects the whole document. Enumerated values are lenient: an
unknown `category` becomes `other` and an unknown `type` becomes `activity`.
The parser never raises; any failure yields None.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from backend.app.models.common import TimelineItemCategory, TimelineItemType
from backend.app.models.itinerary import DayPlan, GeneratedItinerary, TimelineItem

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "No summary available."
DEFAULT_CURRENCY = "PLN"

OPTIONAL_TEXT_FIELDS = (
    "time",
    "location",
    "description",
    "notes",
    "estimated_price",
    "estimated_duration",
)

_CATEGORIES = {c.value: c for c in TimelineItemCategory}
_TYPES = {t.value: t for t in TimelineItemType}


class MalformedContentError(ValueError):
    """Raised internally when a required structural field is missing."""


def _required_text(obj: Mapping[str, Any], key: str, where: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedContentError(f"{where} is missing required field '{key}'")
    return value


def _optional_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    # bool is an int subclass; a boolean price is garbage, not a number
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _string_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [entry for entry in value if isinstance(entry, str)]


def _coerce_category(value: Any) -> TimelineItemCategory:
    if isinstance(value, str):
        return _CATEGORIES.get(value, TimelineItemCategory.other)
    return TimelineItemCategory.other


def _coerce_type(value: Any) -> TimelineItemType:
    if isinstance(value, str):
        return _TYPES.get(value, TimelineItemType.activity)
    return TimelineItemType.activity


def _parse_item(raw: Any, where: str) -> TimelineItem:
    if not isinstance(raw, Mapping):
        raise MalformedContentError(f"{where} is not an object")

    optional = {field: _optional_text(raw.get(field)) for field in OPTIONAL_TEXT_FIELDS}

    return TimelineItem(
        id=_required_text(raw, "id", where),
        title=_required_text(raw, "title", where),
        type=_coerce_type(raw.get("type")),
        category=_coerce_category(raw.get("category")),
        **optional,
    )


def _parse_day(raw: Any, day_index: int) -> DayPlan:
    where = f"day {day_index}"
    if not isinstance(raw, Mapping):
        raise MalformedContentError(f"{where} is not an object")

    date = _required_text(raw, "date", where)
    items = raw.get("items")
    if not isinstance(items, list):
        raise MalformedContentError(f"{where} has no items list")

    return DayPlan(
        date=date,
        items=[
            _parse_item(item, f"item {item_index} in {where}")
            for item_index, item in enumerate(items)
        ],
    )


def normalize_generated_content(content: Any) -> GeneratedItinerary | None:
    """Parse raw generated content into a GeneratedItinerary.

    Args:
        content: Raw JSON value from the model or from storage, or an
            already parsed model (normalized again from its JSON form)

    Returns:
        Normalized itinerary, or None if the structure is invalid
    """
    try:
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json", exclude_none=True)
        if not isinstance(content, Mapping):
            return None

        raw_days = content.get("days")
        if not isinstance(raw_days, list):
            return None

        days = [_parse_day(day, index) for index, day in enumerate(raw_days)]

        seen: set[str] = set()
        for day in days:
            for item in day.items:
                if item.id in seen:
                    raise MalformedContentError(f"duplicate item id '{item.id}'")
                seen.add(item.id)

        summary = content.get("summary")
        currency = content.get("currency")

        return GeneratedItinerary(
            summary=summary if isinstance(summary, str) else DEFAULT_SUMMARY,
            currency=currency if isinstance(currency, str) else DEFAULT_CURRENCY,
            days=days,
            modifications=_string_list(content.get("modifications")),
            warnings=_string_list(content.get("warnings")),
        )
    except Exception as e:
        logger.debug(f"Rejected generated content: {e}")
        return None


def is_valid_generated_content(content: Any) -> bool:
    """Check whether raw content normalizes into a renderable itinerary."""
    return normalize_generated_content(content) is not None

"""Prompt assembly for plan generation.

The system prompt carries language, currency, category and formatting rules;
the user prompt carries the trip-specific facts. Fixed points are listed in
`event_at` order and framed as hard constraints.
"""

from backend.app.models.common import TimelineItemCategory, TravelPace
from backend.app.models.plan import FixedPoint, Plan, Profile

PACE_GUIDANCE = {
    TravelPace.slow: "Relaxed pace with fewer activities per day, longer breaks, more time at each location",
    TravelPace.moderate: "Balanced pace with a mix of activities and free time",
    TravelPace.intensive: "Fast-paced with many activities, packed schedule, shorter breaks",
}

CATEGORY_GUIDANCE = {
    TimelineItemCategory.history: "Historical sites, monuments, heritage",
    TimelineItemCategory.food: "Restaurants, cafes, food markets",
    TimelineItemCategory.sport: "Sports activities, fitness, active recreation",
    TimelineItemCategory.nature: "Parks, gardens, natural attractions",
    TimelineItemCategory.culture: "Museums, art galleries, theaters, concerts",
    TimelineItemCategory.transport: "Transportation between locations",
    TimelineItemCategory.accommodation: "Hotels, check-in/check-out",
    TimelineItemCategory.other: "Everything else, including nightlife and shopping",
}

DATETIME_FORMAT = "%A, %B %d, %Y %H:%M"
EVENT_FORMAT = "%b %d, %Y %H:%M"


def build_system_prompt(language: str) -> str:
    """Build the system prompt with output language and formatting rules."""
    categories = "\n".join(
        f'- "{category.value}" - {description}'
        for category, description in CATEGORY_GUIDANCE.items()
    )

    return f"""You are an expert travel planner AI. Your task is to generate a detailed, structured travel
itinerary from the trip details provided by the user.

LANGUAGE:
- All text in the response (summary, activity titles, descriptions) must be in {language}.
- JSON keys and enum values must stay in English exactly as the schema defines them.

VALIDATE THE REQUEST FIRST:
1. If the destination is not a real, plannable location (fake, nonsensical, or too broad such
   as "Europe"), respond with status "error" and error_type "invalid_location".
2. If the plan cannot realistically be achieved in the given timeframe, respond with status
   "error" and error_type "unrealistic_plan".
In both cases explain the problem in error_message and set the plan fields to null.

CURRENCY:
- Use the ISO 4217 code of the destination's local currency (e.g. EUR, USD, GBP, PLN, JPY).
- Prices are numeric strings WITHOUT currency symbols, in that local currency. Use "0" for free.

FORMAT:
- All times use the 24-hour HH:mm format (e.g. 09:00, 18:00), never AM/PM.
- Dates use YYYY-MM-DD. Produce one day entry per calendar day of the trip.

ACTIVITY CATEGORIES (use only these exact values):
{categories}

USER PREFERENCES ARE THE HIGHEST PRIORITY:
Match the user's interests to the categories above and favor them over generic tourist
attractions. Respect the requested travel pace.

FIXED POINTS ARE IMMUTABLE:
Every fixed point listed by the user MUST appear in the itinerary exactly on its date and time.
Never move, shorten, or omit a fixed point, and never schedule conflicting activities. Build the
rest of the plan around them, taking travel time between locations into account."""


def format_fixed_points(fixed_points: list[FixedPoint]) -> str:
    """Render fixed points as a bullet list ordered by event time."""
    if not fixed_points:
        return "No fixed points scheduled."

    lines = []
    for fp in sorted(fixed_points, key=lambda f: f.event_at):
        duration = f" ({fp.event_duration} min)" if fp.event_duration else ""
        description = fp.description or "No description"
        lines.append(f"- {fp.event_at.strftime(EVENT_FORMAT)}{duration}: {fp.location} - {description}")
    return "\n".join(lines)


def build_user_prompt(plan: Plan, fixed_points: list[FixedPoint], profile: Profile) -> str:
    """Build the user prompt with the trip-specific facts."""
    if plan.start_date is None or plan.end_date is None:
        raise ValueError("Cannot build a prompt for a plan without a date range")

    pace = profile.travel_pace or TravelPace.moderate
    preferences = ", ".join(profile.preferences) if profile.preferences else "No specific preferences"

    return f"""Please generate the travel plan now.

TRIP DETAILS:
- Destination: {plan.destination}
- Start: {plan.start_date.strftime(DATETIME_FORMAT)}
- End: {plan.end_date.strftime(DATETIME_FORMAT)}
- Notes: {plan.notes or "No special notes provided."}

TRAVEL STYLE:
- Pace: {pace.value} ({PACE_GUIDANCE[pace]})
- Interests: {preferences}

FIXED POINTS (non-negotiable):
{format_fixed_points(fixed_points)}"""

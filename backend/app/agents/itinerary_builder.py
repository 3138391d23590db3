"""
Itinerary builder: timeline, cost estimate and headline for a confirmed date.

Times are 12-hour labels ("7:30 PM"). Offsets wrap around midnight so a
before-activity for a 12:30 AM reservation lands on the previous evening's
clock and an after-activity for 11:30 PM lands at 1:00 AM.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Sequence

from app.core.errors import MissingFieldError
from app.models.itinerary import Itinerary, TimelineBlock
from app.models.planning import Activity, Restaurant

logger = logging.getLogger(__name__)

AGENT_LABEL = "itinerary_builder"

MINUTES_PER_DAY = 24 * 60
RESTAURANT_ICON = "🍽️"
FALLBACK_ACTIVITY_ICON = "📍"

PRICE_TIER_COST: dict[str, int] = {"$": 30, "$$": 60, "$$$": 100, "$$$$": 150}
DEFAULT_TIER_COST = 60
COST_PER_ACTIVITY = 25

# minutes: before-activity i of n starts (n - i) * 60 + 30 before the meal,
# after-activity i starts 90 + i * 60 after it
BEFORE_STEP, BEFORE_MARGIN = 60, 30
AFTER_FIRST, AFTER_STEP = 90, 60

_TIME_RE = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*([AaPp]\.?[Mm]\.?)?\s*$")


def parse_time(label: str) -> int:
    """
    Minutes since midnight for "7:30 PM", "7 pm" or 24-hour "19:30".
    Raises MissingFieldError for anything else.
    """
    match = _TIME_RE.match(label or "")
    if not match:
        raise MissingFieldError("time", f"Unrecognized reservation time: {label!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    period = (match.group(3) or "").replace(".", "").upper()

    if minutes > 59:
        raise MissingFieldError("time", f"Unrecognized reservation time: {label!r}")
    if period:
        if not 1 <= hours <= 12:
            raise MissingFieldError("time", f"Unrecognized reservation time: {label!r}")
        hours = hours % 12 + (12 if period == "PM" else 0)
    elif hours > 23:
        raise MissingFieldError("time", f"Unrecognized reservation time: {label!r}")

    return hours * 60 + minutes


def format_time(total_minutes: int) -> str:
    total_minutes %= MINUTES_PER_DAY
    hours, minutes = divmod(total_minutes, 60)
    period = "AM" if hours < 12 else "PM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


def offset_time(base: str, offset_minutes: int) -> str:
    return format_time(parse_time(base) + offset_minutes)


def meal_labels(time_label: str) -> tuple[str, str, str]:
    """(meal, before label, after label) for a reservation time."""
    hour = parse_time(time_label) // 60
    if hour < 11:
        meal = "Breakfast"
    elif hour < 14:
        meal = "Brunch"
    elif hour < 17:
        meal = "Lunch"
    else:
        meal = "Dinner"
    return meal, f"Before {meal}", f"After {meal}"


def estimate_cost(price: str | None, activity_count: int) -> str:
    """
    "$MIN-MAX": 80%..120% of tier base plus 25 per activity, rounded half up.
    """
    total = PRICE_TIER_COST.get(price or "", DEFAULT_TIER_COST) + COST_PER_ACTIVITY * activity_count
    low = (total * 8 + 5) // 10
    high = (total * 12 + 5) // 10
    return f"${low}-{high}"


def headline_for(restaurant: Restaurant) -> str:
    return f"{restaurant.cuisine or 'Date'} Night"


def default_date_label(today: date | None = None) -> str:
    today = today or date.today()
    return f"{today:%A, %B} {today.day}"


def _activity_block(activity: Activity, time_label: str, window_label: str) -> TimelineBlock:
    return TimelineBlock(
        time=time_label,
        icon=activity.icon or FALLBACK_ACTIVITY_ICON,
        title=activity.name,
        subtitle=f"{activity.category} · {window_label}",
        address=activity.address or None,
        has_location=True,
    )


def build_timeline(
    restaurant: Restaurant, activities: Sequence[Activity], time_label: str
) -> list[TimelineBlock]:
    """Blocks in chronological order: before-activities, the meal, after-activities."""
    meal_minutes = parse_time(time_label)
    _, before_label, after_label = meal_labels(time_label)

    before = [a for a in activities if a.time_window == "before"]
    after = [a for a in activities if a.time_window == "after"]

    blocks: list[TimelineBlock] = []
    for i, activity in enumerate(before):
        minutes_before = (len(before) - i) * BEFORE_STEP + BEFORE_MARGIN
        blocks.append(_activity_block(activity, format_time(meal_minutes - minutes_before), before_label))

    blocks.append(
        TimelineBlock(
            time=format_time(meal_minutes),
            icon=RESTAURANT_ICON,
            title=restaurant.name,
            subtitle=f"{restaurant.cuisine or 'Restaurant'} · {restaurant.price or '$$'}",
            extra=restaurant.address or None,
            has_location=True,
        )
    )

    for i, activity in enumerate(after):
        minutes_after = AFTER_FIRST + i * AFTER_STEP
        blocks.append(_activity_block(activity, format_time(meal_minutes + minutes_after), after_label))

    return blocks


def build_itinerary(
    user_id: str,
    restaurant: Restaurant | None,
    activities: Sequence[Activity],
    time_label: str,
    date_label: str | None = None,
) -> Itinerary:
    if restaurant is None:
        raise MissingFieldError("restaurant", "A restaurant must be selected before confirming")

    blocks = build_timeline(restaurant, activities, time_label)
    itinerary = Itinerary(
        user_id=user_id,
        headline=headline_for(restaurant),
        date_label=date_label or default_date_label(),
        restaurant=restaurant,
        activities=list(activities),
        timeline_blocks=blocks,
        cost_estimate=estimate_cost(restaurant.price, len(activities)),
        status="upcoming",
    )
    logger.info("[%s] built %d timeline blocks for %s", AGENT_LABEL, len(blocks), restaurant.name)
    return itinerary

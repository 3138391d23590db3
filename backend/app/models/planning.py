"""
Planning session and venue option models
"""

import math
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

Stage = Literal["loading", "restaurants", "activities", "summary"]
STAGE_ORDER: tuple[str, ...] = ("loading", "restaurants", "activities", "summary")

TimeWindow = Literal["before", "after"]

DEFAULT_RATING = 4.0
DEFAULT_PRICE = "$$"
DEFAULT_PHOTO_URL = "https://images.unsplash.com/photo-1414235077428-338989a2e8c0?w=800"
DEFAULT_ACTIVITY_ICON = "🎯"
DEFAULT_WALKING_MINUTES = 10

# 8:00 AM through 11:30 PM in half-hour steps
AVAILABLE_TIMES: tuple[str, ...] = tuple(
    f"{(h % 12) or 12}:{m:02d} {'AM' if h < 12 else 'PM'}" for h in range(8, 24) for m in (0, 30)
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Restaurant(BaseModel):
    """
    Snapshot of a Yelp business offered as a restaurant option.
    Every field a client renders has a default.
    """

    yelp_id: str = Field(..., description="Yelp business id")
    name: str
    photo_url: str = DEFAULT_PHOTO_URL
    rating: float = DEFAULT_RATING
    price: str = DEFAULT_PRICE
    cuisine: str = "Restaurant"
    tags: list[str] = Field(default_factory=list)
    why_this_works: str = ""
    available_times: list[str] = Field(default_factory=lambda: list(AVAILABLE_TIMES))
    address: str = ""
    distance: str | None = Field(default=None, description="Display distance, e.g. '0.8 mi'")
    latitude: float | None = None
    longitude: float | None = None

    @property
    def has_coordinates(self) -> bool:
        return all(c is not None and math.isfinite(c) for c in (self.latitude, self.longitude))


class Activity(BaseModel):
    """
    Snapshot of a Yelp business offered as a before/after activity.
    """

    yelp_id: str
    name: str
    icon: str = DEFAULT_ACTIVITY_ICON
    photo_url: str = DEFAULT_PHOTO_URL
    rating: float = DEFAULT_RATING
    category: str = "Activity"
    walking_minutes: int = DEFAULT_WALKING_MINUTES
    why_this_works: str = ""
    address: str = ""
    time_window: TimeWindow = "after"
    latitude: float | None = None
    longitude: float | None = None


class ParsedIntent(BaseModel):
    location: str | None = None
    date: str | None = None
    time: str | None = None
    budget: str | None = None


class PlanningSession(BaseModel):
    """
    One in-progress planning flow. Deleted once its itinerary is confirmed.
    """

    id: str | None = None
    user_id: str
    user_prompt: str
    parsed_intent: ParsedIntent = Field(default_factory=ParsedIntent)
    stage: Stage = "loading"
    selected_restaurant: Restaurant | None = None
    selected_time: str | None = None
    selected_activities: list[Activity] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "6720c1f4a8d3b2e1f0a9c871",
                "user_id": "5f0c8a1e-2b7d-4c1a-9a55-0b3e2f6d7c10",
                "user_prompt": "romantic Italian dinner in the West Village",
                "parsed_intent": {"location": "New York, NY", "budget": "$$"},
                "stage": "restaurants",
                "selected_restaurant": None,
                "selected_time": None,
                "selected_activities": [],
            }
        }

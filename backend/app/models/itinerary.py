"""
Itinerary model for MongoDB persistence
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from app.models.planning import Activity, Restaurant

ItineraryStatus = Literal["upcoming", "past"]
FeedbackRating = Literal["great", "meh", "disaster"]


class TimelineBlock(BaseModel):
    """
    One scheduled entry of a finalized itinerary. Embedded only.
    """

    time: str = Field(..., description="12-hour label, e.g. '7:30 PM'")
    icon: str
    title: str
    subtitle: str = ""
    extra: str | None = None
    address: str | None = None
    has_location: bool = True


class Feedback(BaseModel):
    rating: FeedbackRating
    comment: str | None = None


class Itinerary(BaseModel):
    """
    Finalized date plan. Immutable apart from feedback submission.
    """

    id: str | None = None
    user_id: str
    headline: str
    date_label: str
    restaurant: Restaurant
    activities: list[Activity] = Field(default_factory=list)
    timeline_blocks: list[TimelineBlock] = Field(default_factory=list)
    cost_estimate: str
    status: ItineraryStatus = "upcoming"
    feedback: Feedback | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "5f0c8a1e-2b7d-4c1a-9a55-0b3e2f6d7c10",
                "headline": "Italian Night",
                "date_label": "Saturday, October 24",
                "cost_estimate": "$68-102",
                "status": "upcoming",
                "timeline_blocks": [
                    {"time": "5:30 PM", "icon": "📚", "title": "Three Lives & Company",
                     "subtitle": "Bookstores · Before Dinner", "has_location": True},
                    {"time": "7:00 PM", "icon": "🍽️", "title": "Via Carota",
                     "subtitle": "Italian · $$", "extra": "51 Grove St, New York, NY 10014",
                     "has_location": True},
                ],
            }
        }

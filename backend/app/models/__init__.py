"""
Models package for database schemas
"""

from app.models.itinerary import Feedback, Itinerary, TimelineBlock
from app.models.nft import DateMemoryNFT
from app.models.planning import Activity, ParsedIntent, PlanningSession, Restaurant
from app.models.profile import UserProfile

__all__ = [
    "Activity",
    "DateMemoryNFT",
    "Feedback",
    "Itinerary",
    "ParsedIntent",
    "PlanningSession",
    "Restaurant",
    "TimelineBlock",
    "UserProfile",
]

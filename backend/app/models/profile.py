"""
User profile preferences
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

BudgetTier = Literal["$", "$$", "$$$", "$$$$"]


class UserProfile(BaseModel):
    """
    One profile per user, upserted by user_id.
    """

    user_id: str = Field(..., description="Owning user id (JWT subject)")
    location: str | None = Field(None, description="Default search location, e.g. 'Brooklyn, NY'")
    budget: BudgetTier | None = Field(None, description="Default price tier")
    dietary: list[str] = Field(default_factory=list, description="Dietary restriction tags")
    vibe_tags: list[str] = Field(default_factory=list, description="Preferred date vibes")

    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

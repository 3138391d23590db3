"""
Boundary models for Yelp AI API payloads.

The upstream contract is loose: every field is optional and unknown keys are
ignored. Anything that still fails validation is dropped by the transformer.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _YelpModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class YelpCategory(_YelpModel):
    alias: str | None = None
    title: str | None = None


class YelpLocation(_YelpModel):
    address1: str | None = None
    city: str | None = None
    display_address: list[str] = Field(default_factory=list)
    formatted_address: str | None = None


class YelpCoordinates(_YelpModel):
    latitude: float | None = None
    longitude: float | None = None


class YelpBusiness(_YelpModel):
    id: str | None = None
    alias: str | None = None
    name: str | None = None
    url: str | None = None
    image_url: str | None = None
    photos: list[str] = Field(default_factory=list)
    rating: float | None = None
    review_count: int | None = None
    price: str | None = None
    categories: list[YelpCategory] = Field(default_factory=list)
    location: YelpLocation | None = None
    coordinates: YelpCoordinates | None = None
    # meters from the search point for numeric values; strings may carry a unit ("0.4 mi")
    distance: float | str | None = None
    snippet_text: str | None = None
    summaries: dict[str, Any] | None = None

    @property
    def primary_category(self) -> YelpCategory | None:
        return self.categories[0] if self.categories else None


class YelpChatResult(BaseModel):
    """Normalized result of a single AI query."""

    text: str = ""
    chat_id: str | None = None
    businesses: list[YelpBusiness] = Field(default_factory=list)
    degraded: bool = Field(default=False, description="True when the upstream call failed")

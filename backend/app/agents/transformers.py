"""
Normalization of Yelp AI payloads into Restaurant / Activity records.

Nothing in this module raises on upstream data: unknown shapes yield empty
lists and every missing field gets a deterministic default.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from pydantic import ValidationError

from app.models.planning import (
    AVAILABLE_TIMES,
    DEFAULT_ACTIVITY_ICON,
    DEFAULT_PHOTO_URL,
    DEFAULT_PRICE,
    DEFAULT_RATING,
    DEFAULT_WALKING_MINUTES,
    Activity,
    Restaurant,
)
from app.models.yelp import YelpBusiness

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.34
# 3 mph walking pace
WALKING_MINUTES_PER_MILE = 20

# Checked in order, first match wins
BUSINESS_PATHS: tuple[tuple[str | int, ...], ...] = (
    ("businesses",),
    ("response", "businesses"),
    ("entities", 0, "businesses"),
)

# (keywords, time window, icon); checked in order, first match wins
ACTIVITY_RULES: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (("cocktail", "bar", "pub", "lounge", "speakeasy"), "after", "🍸"),
    (("comedy",), "after", "🎭"),
    (("bowling", "golf", "arcade", "karaoke"), "after", "🎳"),
    (("jazz", "music", "dance"), "after", "🎶"),
    (("wine", "winer"), "before", "🍷"),
    (("book", "coffee", "cafe"), "before", "📚"),
    (("museum", "galler", "arts"), "before", "🖼️"),
    (("park", "garden"), "before", "🌳"),
)

_DISTANCE_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(mi|miles?|km|m|meters?)?\s*$", re.IGNORECASE)


def _walk(data: Any, path: tuple[str | int, ...]) -> Any:
    node = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or len(node) <= key:
                return None
        elif not isinstance(node, dict):
            return None
        node = node[key] if isinstance(key, int) else node.get(key)
    return node


def extract_businesses(data: Any) -> list[YelpBusiness]:
    """
    Pull the business list out of an AI response, trying each known location.
    Records that fail validation are skipped; the first location with at least
    one valid record wins.
    """
    for path in BUSINESS_PATHS:
        found = _walk(data, path)
        if isinstance(found, list):
            businesses = _validate_businesses(found)
            if businesses:
                return businesses
    return []


def _validate_businesses(raw: list[Any]) -> list[YelpBusiness]:
    businesses: list[YelpBusiness] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            businesses.append(YelpBusiness.model_validate(item))
        except ValidationError as e:
            logger.debug("[transformers] skipping malformed business %r: %s", item.get("id"), e)
    return businesses


def extract_ai_text(data: Any) -> str:
    text = _walk(data, ("response", "text")) or _walk(data, ("message",))
    return text if isinstance(text, str) else ""


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "venue"


def _business_id(biz: YelpBusiness, name: str) -> str:
    return biz.id or biz.alias or _slug(name)


def _photo_url(biz: YelpBusiness) -> str:
    return biz.image_url or (biz.photos[0] if biz.photos else None) or DEFAULT_PHOTO_URL


def _address(biz: YelpBusiness) -> str:
    loc = biz.location
    if loc is None:
        return ""
    if loc.display_address:
        return ", ".join(part for part in loc.display_address if part)
    return loc.formatted_address or loc.address1 or ""


def _finite(value: float | None) -> float | None:
    return value if value is not None and math.isfinite(value) else None


def _coordinates(biz: YelpBusiness) -> tuple[float | None, float | None]:
    if biz.coordinates is None:
        return None, None
    lat, lon = _finite(biz.coordinates.latitude), _finite(biz.coordinates.longitude)
    if lat is None or lon is None:
        return None, None
    return lat, lon


def distance_in_miles(distance: float | str | None) -> float | None:
    """
    Numbers are meters (what Yelp reports); strings may carry a unit.
    Returns None when nothing usable is present, including non-finite values.
    """
    if distance is None:
        return None
    if isinstance(distance, (int, float)):
        return _finite(float(distance) / METERS_PER_MILE) if distance >= 0 else None

    match = _DISTANCE_RE.match(distance)
    if not match:
        return None
    value = _finite(float(match.group(1)))
    if value is None:
        return None
    unit = (match.group(2) or "m").lower()
    if unit.startswith("mi"):
        return value
    if unit == "km":
        return value * 1000 / METERS_PER_MILE
    return value / METERS_PER_MILE


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    r_miles = 3958.8
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dp = p2 - p1
    dl = math.radians(lon2 - lon1)
    a = math.sin(dp / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    return 2 * r_miles * math.asin(math.sqrt(a))


def walking_minutes(
    biz: YelpBusiness, origin: tuple[float, float] | None = None
) -> int:
    miles = distance_in_miles(biz.distance)
    if miles is None and origin is not None and all(math.isfinite(c) for c in origin):
        lat, lon = _coordinates(biz)
        if lat is not None and lon is not None:
            miles = haversine_miles(origin[0], origin[1], lat, lon)
    if miles is None:
        return DEFAULT_WALKING_MINUTES
    return round(miles * WALKING_MINUTES_PER_MILE)


def classify_activity(category: str) -> tuple[str, str]:
    """Return (time_window, icon) for a category string."""
    text = category.lower()
    for keywords, window, icon in ACTIVITY_RULES:
        if any(k in text for k in keywords):
            return window, icon
    return "after", DEFAULT_ACTIVITY_ICON


def _why_restaurant(biz: YelpBusiness, price: str, rating: float) -> str:
    if biz.summaries:
        summary = biz.summaries.get("short") or biz.summaries.get("medium")
        if isinstance(summary, str) and summary:
            return summary
    if biz.snippet_text:
        return biz.snippet_text

    price_desc = {
        "$": "budget-friendly",
        "$$": "moderately priced",
        "$$$": "upscale",
    }.get(price, "fine dining")
    rating_desc = "exceptional" if rating >= 4.5 else "highly rated" if rating >= 4 else "popular"
    known_for = ", ".join(c.title for c in biz.categories if c.title) or "great food"
    reviews = f"With {biz.review_count} reviews, it's" if biz.review_count else "It's"
    return f"{rating_desc.capitalize()} {price_desc} spot known for {known_for}. {reviews} a great choice for your date."


def to_restaurant(biz: YelpBusiness) -> Restaurant:
    name = biz.name or "Unnamed restaurant"
    rating = biz.rating if biz.rating is not None else DEFAULT_RATING
    price = biz.price or DEFAULT_PRICE
    primary = biz.primary_category
    miles = distance_in_miles(biz.distance)
    lat, lon = _coordinates(biz)

    return Restaurant(
        yelp_id=_business_id(biz, name),
        name=name,
        photo_url=_photo_url(biz),
        rating=rating,
        price=price,
        cuisine=(primary.title if primary and primary.title else "Restaurant"),
        tags=[c.title for c in biz.categories if c.title],
        why_this_works=_why_restaurant(biz, price, rating),
        available_times=list(AVAILABLE_TIMES),
        address=_address(biz),
        distance=f"{miles:.1f} mi" if miles is not None else None,
        latitude=lat,
        longitude=lon,
    )


def to_activity(biz: YelpBusiness, origin: tuple[float, float] | None = None) -> Activity:
    name = biz.name or "Unnamed spot"
    rating = biz.rating if biz.rating is not None else DEFAULT_RATING
    primary = biz.primary_category
    category = (primary.title if primary and primary.title else "Activity")
    classify_on = " ".join(filter(None, [category, primary.alias if primary else None]))
    window, icon = classify_activity(classify_on)
    lat, lon = _coordinates(biz)

    reviews = f" with {biz.review_count} reviews" if biz.review_count else ""
    return Activity(
        yelp_id=_business_id(biz, name),
        name=name,
        icon=icon,
        photo_url=_photo_url(biz),
        rating=rating,
        category=category,
        walking_minutes=walking_minutes(biz, origin),
        why_this_works=f"{rating} stars{reviews} - perfect for {window} dinner",
        address=_address(biz),
        time_window=window,
        latitude=lat,
        longitude=lon,
    )


def to_restaurants(businesses: list[YelpBusiness]) -> list[Restaurant]:
    return [to_restaurant(b) for b in businesses]


def to_activities(
    businesses: list[YelpBusiness], origin: tuple[float, float] | None = None
) -> list[Activity]:
    return [to_activity(b, origin) for b in businesses]

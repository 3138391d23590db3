"""
Planning orchestrator: walks a PlanningSession through
loading -> restaurants -> activities -> summary and finally into an Itinerary.

Each call is one independent request against the store. Upstream AI failures
never fail a call; they show up as empty option lists. Stage transitions are
retry-safe: options are replaced rather than appended, and repeating the
current stage's transition is allowed. Moving backwards is not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from app.agents import itinerary_builder
from app.agents.persistence import PlanningStore
from app.agents.transformers import to_activities, to_restaurants
from app.agents.yelp_client import YelpAIClient
from app.core.config import (
    ACTIVITY_RADIUS_METERS,
    DEFAULT_BUDGET,
    DEFAULT_LOCATION,
    DEFAULT_RESERVATION_TIME,
)
from app.core.errors import MissingFieldError, NotFoundError, StageTransitionError
from app.models.itinerary import Feedback, Itinerary
from app.models.nft import DateMemoryNFT
from app.models.planning import STAGE_ORDER, Activity, ParsedIntent, PlanningSession, Restaurant
from app.models.profile import UserProfile

logger = logging.getLogger(__name__)

AGENT_LABEL = "orchestrator"

REFINE_FALLBACK_TEXT = "I couldn't reach Yelp right now. Please try again in a moment."


@dataclass
class PlanningPreferences:
    """Request-level overrides; anything unset falls back to the stored profile."""

    location: str | None = None
    budget: str | None = None
    date: str | None = None
    time: str | None = None
    dietary: list[str] = field(default_factory=list)
    vibe_tags: list[str] = field(default_factory=list)


def restaurant_query(
    prompt: str,
    location: str,
    budget: str,
    dietary: list[str] | None = None,
    vibe_tags: list[str] | None = None,
) -> str:
    query = (
        f"Find romantic restaurants for a date: {prompt}. Budget: {budget}. "
        f"Location: {location}. Looking for options with great ambiance."
    )
    if dietary:
        query += f" Must accommodate: {', '.join(dietary)}."
    if vibe_tags:
        query += f" Vibe: {', '.join(vibe_tags)}."
    return query


def activity_query(latitude: float, longitude: float, radius_meters: int) -> str:
    return (
        f"Find fun date activities such as cocktail bars, comedy clubs, bookstores, "
        f"bowling, and wine tasting within {radius_meters} meters of "
        f"latitude {latitude}, longitude {longitude}."
    )


def refine_query(message: str, location: str) -> str:
    return f"Find restaurants for a date: {message}. Location: {location}."


class PlanningOrchestrator:
    def __init__(self, store: PlanningStore, yelp: YelpAIClient) -> None:
        self.store = store
        self.yelp = yelp

    # ----- helpers -----

    async def _owned_session(self, session_id: str, user_id: str) -> PlanningSession:
        session = await self.store.get_session(session_id, user_id)
        if session is None:
            raise NotFoundError("Session not found")
        return session

    async def _advance(self, session: PlanningSession, stage: str, updates: dict[str, Any]) -> None:
        if STAGE_ORDER.index(stage) < STAGE_ORDER.index(session.stage):
            raise StageTransitionError(f"Session is already at '{session.stage}', cannot go back to '{stage}'")
        matched = await self.store.update_session(session.id, session.user_id, {"stage": stage, **updates})
        if not matched:
            # deleted between read and write
            raise NotFoundError("Session not found")
        logger.info("[%s] session %s: %s -> %s", AGENT_LABEL, session.id, session.stage, stage)

    # ----- stage transitions -----

    async def start_session(
        self, user_id: str, prompt: str, preferences: PlanningPreferences | None = None
    ) -> dict[str, Any]:
        if not prompt or not prompt.strip():
            raise MissingFieldError("prompt")
        prefs = preferences or PlanningPreferences()

        profile = await self.store.get_profile(user_id)
        location = prefs.location or (profile.location if profile else None) or DEFAULT_LOCATION
        budget = prefs.budget or (profile.budget if profile else None) or DEFAULT_BUDGET
        dietary = prefs.dietary or (profile.dietary if profile else [])
        vibe_tags = prefs.vibe_tags or (profile.vibe_tags if profile else [])

        session = await self.store.create_session(
            PlanningSession(
                user_id=user_id,
                user_prompt=prompt.strip(),
                parsed_intent=ParsedIntent(location=location, date=prefs.date, time=prefs.time, budget=budget),
                stage="loading",
            )
        )
        logger.info("[%s] planning session %s started for %s", AGENT_LABEL, session.id, user_id)

        result = await self.yelp.chat(restaurant_query(prompt.strip(), location, budget, dietary, vibe_tags))
        restaurants = to_restaurants(result.businesses)
        await self.store.replace_restaurant_options(session.id, restaurants)
        await self._advance(session, "restaurants", {})

        return {"session_id": session.id, "restaurants": restaurants, "stage": "restaurants"}

    async def select_restaurant(
        self, user_id: str, session_id: str, restaurant: Restaurant, time: str
    ) -> dict[str, Any]:
        session = await self._owned_session(session_id, user_id)
        itinerary_builder.parse_time(time)
        await self._advance(
            session,
            "activities",
            {"selected_restaurant": restaurant.model_dump(), "selected_time": time},
        )

        activities: list[Activity] = []
        if restaurant.has_coordinates:
            origin = (restaurant.latitude, restaurant.longitude)
            result = await self.yelp.chat(activity_query(*origin, ACTIVITY_RADIUS_METERS))
            activities = to_activities(result.businesses, origin=origin)
        else:
            logger.info("[%s] %s has no coordinates; skipping activity search", AGENT_LABEL, restaurant.name)
        await self.store.replace_activity_options(session_id, activities)

        return {"session_id": session_id, "activities": activities, "stage": "activities"}

    async def select_activities(
        self, user_id: str, session_id: str, activities: list[Activity], skip: bool = False
    ) -> dict[str, Any]:
        session = await self._owned_session(session_id, user_id)
        chosen = [] if skip else list(activities)
        await self._advance(session, "summary", {"selected_activities": [a.model_dump() for a in chosen]})
        return {"session_id": session_id, "activities": chosen, "stage": "summary"}

    async def confirm_itinerary(
        self, user_id: str, session_id: str, date_label: str | None = None
    ) -> Itinerary:
        session = await self._owned_session(session_id, user_id)
        if session.selected_restaurant is None:
            raise MissingFieldError("restaurant", "A restaurant must be selected before confirming")

        itinerary = itinerary_builder.build_itinerary(
            user_id=user_id,
            restaurant=session.selected_restaurant,
            activities=session.selected_activities,
            time_label=session.selected_time or session.parsed_intent.time or DEFAULT_RESERVATION_TIME,
            date_label=date_label or session.parsed_intent.date,
        )
        saved = await self.store.create_itinerary(itinerary)
        await self.store.delete_session(session_id, user_id)
        logger.info("[%s] session %s confirmed as itinerary %s", AGENT_LABEL, session_id, saved.id)
        return saved

    # ----- conversational refinement -----

    async def refine_restaurants(
        self,
        user_id: str,
        message: str,
        chat_id: str | None = None,
        session_id: str | None = None,
        location: str | None = None,
    ) -> dict[str, Any]:
        if not message or not message.strip():
            raise MissingFieldError("message")
        if session_id:
            await self._owned_session(session_id, user_id)

        if not location:
            profile = await self.store.get_profile(user_id)
            location = (profile.location if profile else None) or DEFAULT_LOCATION

        result = await self.yelp.chat(refine_query(message.strip(), location), chat_id=chat_id)
        restaurants = to_restaurants(result.businesses)

        if session_id and restaurants:
            await self.store.replace_restaurant_options(session_id, restaurants)

        ai_response = result.text or (
            REFINE_FALLBACK_TEXT if result.degraded else "Here are some options based on your request:"
        )
        return {"ai_response": ai_response, "chat_id": result.chat_id, "restaurants": restaurants}

    # ----- itineraries -----

    async def list_itineraries(self, user_id: str) -> dict[str, list[Itinerary]]:
        itineraries = await self.store.list_itineraries(user_id)
        return {
            "itineraries": itineraries,
            "upcoming": [i for i in itineraries if i.status == "upcoming"],
            "past": [i for i in itineraries if i.status == "past"],
        }

    async def get_itinerary(self, user_id: str, itinerary_id: str) -> Itinerary:
        itinerary = await self.store.get_itinerary(itinerary_id, user_id)
        if itinerary is None:
            raise NotFoundError("Itinerary not found")
        return itinerary

    async def submit_feedback(
        self, user_id: str, itinerary_id: str, rating: str, comment: str | None = None
    ) -> Itinerary:
        feedback = Feedback(rating=rating, comment=comment)
        itinerary = await self.store.set_feedback(itinerary_id, user_id, feedback)
        if itinerary is None:
            raise NotFoundError("Itinerary not found")
        return itinerary

    # ----- profile & nft records -----

    async def get_profile(self, user_id: str) -> UserProfile:
        return await self.store.get_profile(user_id) or UserProfile(user_id=user_id)

    async def update_profile(self, profile: UserProfile) -> UserProfile:
        return await self.store.upsert_profile(profile)

    async def save_nft(self, nft: DateMemoryNFT, status: str | None = None) -> DateMemoryNFT:
        await self.get_itinerary(nft.user_id, nft.itinerary_id)
        return await self.store.upsert_nft(nft, status=status)

    async def get_nft(self, user_id: str, itinerary_id: str) -> DateMemoryNFT | None:
        return await self.store.get_nft(user_id, itinerary_id)

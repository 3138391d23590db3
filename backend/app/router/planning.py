"""
Planning Router
Stage transitions of a date-planning session plus conversational refinement
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.agents.orchestrator import PlanningOrchestrator, PlanningPreferences
from app.core.errors import PlanningError
from app.core.security import get_current_user_id
from app.models.common import APIResponse
from app.models.planning import Activity, Restaurant
from app.models.profile import BudgetTier
from app.router.dependencies import get_orchestrator, http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plan", tags=["Planning"])


class PreferencesIn(BaseModel):
    location: str | None = None
    budget: BudgetTier | None = None
    dietary: list[str] = Field(default_factory=list)
    vibe_tags: list[str] = Field(default_factory=list)


class PlanStartRequest(BaseModel):
    prompt: str = Field(..., min_length=1, description="Free-text description of the date")
    preferences: PreferencesIn | None = None
    # top-level overrides win over `preferences`
    location: str | None = None
    budget: BudgetTier | None = None
    date: str | None = None
    time: str | None = None


class RestaurantSelectRequest(BaseModel):
    session_id: str
    restaurant: Restaurant
    time: str


class ActivitySelectRequest(BaseModel):
    session_id: str
    activities: list[Activity] = Field(default_factory=list)
    skip: bool = False


class ItineraryConfirmRequest(BaseModel):
    session_id: str
    date_label: str | None = None


class RefineRequest(BaseModel):
    message: str = Field(..., min_length=1)
    chat_id: str | None = Field(None, description="Continue an existing Yelp AI conversation")
    session_id: str | None = None
    location: str | None = None


def _dump(items) -> list[dict]:
    return [item.model_dump(mode="json") for item in items]


@router.post("/start", response_model=APIResponse)
async def plan_start(
    body: PlanStartRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    """
    Create a planning session and return restaurant suggestions.
    An unreachable AI provider yields an empty list, not an error.
    """
    prefs_in = body.preferences or PreferencesIn()
    prefs = PlanningPreferences(
        location=body.location or prefs_in.location,
        budget=body.budget or prefs_in.budget,
        date=body.date,
        time=body.time,
        dietary=prefs_in.dietary,
        vibe_tags=prefs_in.vibe_tags,
    )
    logger.info("[plan] start for user=%s prompt=%r", user_id, body.prompt[:120])

    try:
        result = await orchestrator.start_session(user_id, body.prompt, prefs)
    except PlanningError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception("[plan] start failed")
        raise HTTPException(status_code=500, detail=f"Failed to start planning session: {e}")

    return APIResponse(
        data={
            "session_id": result["session_id"],
            "restaurants": _dump(result["restaurants"]),
            "stage": result["stage"],
        }
    )


@router.post("/restaurant-select", response_model=APIResponse)
async def restaurant_select(
    body: RestaurantSelectRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    logger.info("[plan] restaurant %r at %s for session=%s", body.restaurant.name, body.time, body.session_id)
    try:
        result = await orchestrator.select_restaurant(user_id, body.session_id, body.restaurant, body.time)
    except PlanningError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception("[plan] restaurant-select failed")
        raise HTTPException(status_code=500, detail=f"Failed to select restaurant: {e}")

    return APIResponse(
        data={
            "session_id": result["session_id"],
            "activities": _dump(result["activities"]),
            "stage": result["stage"],
        }
    )


@router.post("/activity-select", response_model=APIResponse)
async def activity_select(
    body: ActivitySelectRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    try:
        result = await orchestrator.select_activities(user_id, body.session_id, body.activities, body.skip)
    except PlanningError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception("[plan] activity-select failed")
        raise HTTPException(status_code=500, detail=f"Failed to select activities: {e}")

    return APIResponse(
        data={
            "session_id": result["session_id"],
            "activities": _dump(result["activities"]),
            "stage": result["stage"],
        }
    )


@router.post("/itinerary-confirm", response_model=APIResponse)
async def itinerary_confirm(
    body: ItineraryConfirmRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    try:
        itinerary = await orchestrator.confirm_itinerary(user_id, body.session_id, body.date_label)
    except PlanningError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception("[plan] itinerary-confirm failed")
        raise HTTPException(status_code=500, detail=f"Failed to confirm itinerary: {e}")

    return APIResponse(data={"itinerary": itinerary.model_dump(mode="json")})


@router.post("/chat", response_model=APIResponse)
async def refine_chat(
    body: RefineRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    """
    Multi-turn refinement of restaurant suggestions. Pass back `chat_id` to continue.
    """
    try:
        result = await orchestrator.refine_restaurants(
            user_id, body.message, chat_id=body.chat_id, session_id=body.session_id, location=body.location
        )
    except PlanningError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception("[plan] chat failed")
        raise HTTPException(status_code=500, detail=f"Failed to refine suggestions: {e}")

    return APIResponse(
        data={
            "ai_response": result["ai_response"],
            "chat_id": result["chat_id"],
            "restaurants": _dump(result["restaurants"]),
        }
    )

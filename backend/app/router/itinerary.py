"""
Itinerary Router
Saved dates and post-date feedback
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.agents.orchestrator import PlanningOrchestrator
from app.core.errors import PlanningError
from app.core.security import get_current_user_id
from app.models.common import APIResponse
from app.models.itinerary import FeedbackRating
from app.router.dependencies import get_orchestrator, http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/itineraries", tags=["Itineraries"])


class FeedbackRequest(BaseModel):
    rating: FeedbackRating
    comment: str | None = None


@router.get("/", response_model=APIResponse)
async def list_itineraries(
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    try:
        grouped = await orchestrator.list_itineraries(user_id)
    except Exception as e:
        logger.exception("[itineraries] list failed")
        raise HTTPException(status_code=500, detail=f"Failed to load itineraries: {e}")

    return APIResponse(
        data={key: [i.model_dump(mode="json") for i in items] for key, items in grouped.items()}
    )


@router.get("/{itinerary_id}", response_model=APIResponse)
async def get_itinerary(
    itinerary_id: str,
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    try:
        itinerary = await orchestrator.get_itinerary(user_id, itinerary_id)
    except PlanningError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception("[itineraries] get failed")
        raise HTTPException(status_code=500, detail=f"Failed to load itinerary: {e}")

    return APIResponse(data={"itinerary": itinerary.model_dump(mode="json")})


@router.post("/{itinerary_id}/feedback", response_model=APIResponse)
async def submit_feedback(
    itinerary_id: str,
    body: FeedbackRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    """
    Rate a date. Also marks the itinerary as past.
    """
    logger.info("[itineraries] feedback %s for %s", body.rating, itinerary_id)
    try:
        itinerary = await orchestrator.submit_feedback(user_id, itinerary_id, body.rating, body.comment)
    except PlanningError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception("[itineraries] feedback failed")
        raise HTTPException(status_code=500, detail=f"Failed to submit feedback: {e}")

    return APIResponse(data={"itinerary": itinerary.model_dump(mode="json")})

"""
Profile Router
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.agents.orchestrator import PlanningOrchestrator
from app.core.security import get_current_user_id
from app.models.common import APIResponse
from app.models.profile import BudgetTier, UserProfile
from app.router.dependencies import get_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])


class UpdateProfileRequest(BaseModel):
    location: str | None = None
    budget: BudgetTier | None = None
    dietary: list[str] = Field(default_factory=list)
    vibe_tags: list[str] = Field(default_factory=list)


@router.get("/", response_model=APIResponse)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    try:
        profile = await orchestrator.get_profile(user_id)
    except Exception as e:
        logger.exception("[profile] get failed")
        raise HTTPException(status_code=500, detail=f"Failed to load profile: {e}")
    return APIResponse(data={"profile": profile.model_dump(mode="json")})


@router.put("/", response_model=APIResponse)
async def update_profile(
    body: UpdateProfileRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    """
    Create or replace the caller's profile.
    """
    logger.info("[profile] update for user=%s budget=%s", user_id, body.budget)
    try:
        profile = await orchestrator.update_profile(UserProfile(user_id=user_id, **body.model_dump()))
    except Exception as e:
        logger.exception("[profile] update failed")
        raise HTTPException(status_code=500, detail=f"Failed to update profile: {e}")
    return APIResponse(data={"profile": profile.model_dump(mode="json")})

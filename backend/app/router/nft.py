"""
NFT Router
Bookkeeping for date-memory NFTs minted by the client
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.agents.orchestrator import PlanningOrchestrator
from app.core.errors import PlanningError
from app.core.security import get_current_user_id
from app.models.common import APIResponse
from app.models.nft import DateMemoryNFT
from app.router.dependencies import get_orchestrator, http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/nfts", tags=["NFTs"])


class SaveNFTRequest(BaseModel):
    itinerary_id: str = Field(..., min_length=1)
    ipfs_cid: str = Field(..., min_length=1)
    collection_id: int | None = None
    item_id: int | None = None
    transaction_hash: str | None = None
    subscan_url: str | None = None
    wallet_address: str | None = None
    status: str | None = None


@router.post("/", response_model=APIResponse)
async def save_nft(
    body: SaveNFTRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    logger.info("[nft] saving record for itinerary %s", body.itinerary_id)
    record = DateMemoryNFT(user_id=user_id, **body.model_dump(exclude={"status"}))
    try:
        nft = await orchestrator.save_nft(record, status=body.status)
    except PlanningError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception("[nft] save failed")
        raise HTTPException(status_code=500, detail=f"Failed to save NFT record: {e}")
    return APIResponse(data={"nft": nft.model_dump(mode="json")})


@router.get("/{itinerary_id}", response_model=APIResponse)
async def get_nft(
    itinerary_id: str,
    user_id: str = Depends(get_current_user_id),
    orchestrator: PlanningOrchestrator = Depends(get_orchestrator),
):
    try:
        nft = await orchestrator.get_nft(user_id, itinerary_id)
    except Exception as e:
        logger.exception("[nft] get failed")
        raise HTTPException(status_code=500, detail=f"Failed to load NFT record: {e}")
    return APIResponse(data={"nft": nft.model_dump(mode="json") if nft else None})

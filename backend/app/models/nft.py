"""
Date-memory NFT record. Only the bookkeeping row lives here; minting happens client-side.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class DateMemoryNFT(BaseModel):
    id: str | None = None
    user_id: str
    itinerary_id: str
    ipfs_cid: str
    collection_id: int | None = None
    item_id: int | None = None
    transaction_hash: str | None = None
    subscan_url: str | None = None
    wallet_address: str | None = None
    status: str = Field(default="pending", description="pending|minted|failed")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

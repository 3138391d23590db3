"""
Typed access to the MongoDB collections.

Every read and write of user-owned data filters on ``user_id``. Ids are
ObjectId hex strings; a malformed id is treated the same as a missing record.
Database errors propagate to the caller untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument

from app.models.itinerary import Feedback, Itinerary
from app.models.nft import DateMemoryNFT
from app.models.planning import Activity, PlanningSession, Restaurant
from app.models.profile import UserProfile

logger = logging.getLogger(__name__)

AGENT_LABEL = "persistence"


def _object_id(value: str | None) -> ObjectId | None:
    # ObjectId(None) would mint a fresh id
    if not value:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _with_id(doc: dict[str, Any]) -> dict[str, Any]:
    out = dict(doc)
    out["id"] = str(out.pop("_id"))
    return out


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PlanningStore:
    def __init__(self, db) -> None:
        self.sessions = db.planning_sessions
        self.restaurant_options = db.restaurant_options
        self.activity_options = db.activity_options
        self.itineraries = db.itineraries
        self.profiles = db.profiles
        self.nfts = db.date_memory_nfts

    # ----- planning sessions -----

    async def create_session(self, session: PlanningSession) -> PlanningSession:
        result = await self.sessions.insert_one(session.model_dump(exclude={"id"}))
        logger.info("[%s] created session %s for user %s", AGENT_LABEL, result.inserted_id, session.user_id)
        return session.model_copy(update={"id": str(result.inserted_id)})

    async def get_session(self, session_id: str, user_id: str) -> PlanningSession | None:
        oid = _object_id(session_id)
        if oid is None:
            return None
        doc = await self.sessions.find_one({"_id": oid, "user_id": user_id})
        return PlanningSession.model_validate(_with_id(doc)) if doc else None

    async def update_session(self, session_id: str, user_id: str, updates: dict[str, Any]) -> bool:
        """Apply a partial update. Returns False when no owned session matched."""
        oid = _object_id(session_id)
        if oid is None:
            return False
        result = await self.sessions.update_one(
            {"_id": oid, "user_id": user_id},
            {"$set": {**updates, "updated_at": _now()}},
        )
        logger.info("[%s] session %s updated: %s", AGENT_LABEL, session_id, sorted(updates))
        return result.matched_count > 0

    async def delete_session(self, session_id: str, user_id: str) -> None:
        oid = _object_id(session_id)
        if oid is None:
            return
        await self.sessions.delete_one({"_id": oid, "user_id": user_id})
        await self.delete_options(session_id)
        logger.info("[%s] deleted session %s and its options", AGENT_LABEL, session_id)

    # ----- option snapshots -----

    async def replace_restaurant_options(self, session_id: str, restaurants: list[Restaurant]) -> None:
        await self.restaurant_options.delete_many({"session_id": session_id})
        if restaurants:
            await self.restaurant_options.insert_many(
                [{**r.model_dump(), "session_id": session_id, "created_at": _now()} for r in restaurants]
            )
        logger.info("[%s] saved %d restaurant options for %s", AGENT_LABEL, len(restaurants), session_id)

    async def replace_activity_options(self, session_id: str, activities: list[Activity]) -> None:
        await self.activity_options.delete_many({"session_id": session_id})
        if activities:
            await self.activity_options.insert_many(
                [{**a.model_dump(), "session_id": session_id, "created_at": _now()} for a in activities]
            )
        logger.info("[%s] saved %d activity options for %s", AGENT_LABEL, len(activities), session_id)

    async def list_restaurant_options(self, session_id: str) -> list[Restaurant]:
        docs = await self.restaurant_options.find({"session_id": session_id}).to_list(length=None)
        return [Restaurant.model_validate(d) for d in docs]

    async def list_activity_options(self, session_id: str) -> list[Activity]:
        docs = await self.activity_options.find({"session_id": session_id}).to_list(length=None)
        return [Activity.model_validate(d) for d in docs]

    async def delete_options(self, session_id: str) -> None:
        await self.restaurant_options.delete_many({"session_id": session_id})
        await self.activity_options.delete_many({"session_id": session_id})

    # ----- itineraries -----

    async def create_itinerary(self, itinerary: Itinerary) -> Itinerary:
        result = await self.itineraries.insert_one(itinerary.model_dump(exclude={"id"}))
        logger.info("[%s] created itinerary %s for user %s", AGENT_LABEL, result.inserted_id, itinerary.user_id)
        return itinerary.model_copy(update={"id": str(result.inserted_id)})

    async def list_itineraries(self, user_id: str) -> list[Itinerary]:
        cursor = self.itineraries.find({"user_id": user_id}).sort("created_at", DESCENDING)
        docs = await cursor.to_list(length=None)
        return [Itinerary.model_validate(_with_id(d)) for d in docs]

    async def get_itinerary(self, itinerary_id: str, user_id: str) -> Itinerary | None:
        oid = _object_id(itinerary_id)
        if oid is None:
            return None
        doc = await self.itineraries.find_one({"_id": oid, "user_id": user_id})
        return Itinerary.model_validate(_with_id(doc)) if doc else None

    async def set_feedback(self, itinerary_id: str, user_id: str, feedback: Feedback) -> Itinerary | None:
        oid = _object_id(itinerary_id)
        if oid is None:
            return None
        doc = await self.itineraries.find_one_and_update(
            {"_id": oid, "user_id": user_id},
            {"$set": {"feedback": feedback.model_dump(), "status": "past"}},
            return_document=ReturnDocument.AFTER,
        )
        return Itinerary.model_validate(_with_id(doc)) if doc else None

    # ----- profiles -----

    async def get_profile(self, user_id: str) -> UserProfile | None:
        doc = await self.profiles.find_one({"user_id": user_id})
        if not doc:
            return None
        doc.pop("_id", None)
        return UserProfile.model_validate(doc)

    async def upsert_profile(self, profile: UserProfile) -> UserProfile:
        profile = profile.model_copy(update={"updated_at": _now()})
        existing = await self.profiles.find_one({"user_id": profile.user_id})
        if existing:
            await self.profiles.update_one({"user_id": profile.user_id}, {"$set": profile.model_dump()})
            logger.info("[%s] updated profile for %s", AGENT_LABEL, profile.user_id)
        else:
            await self.profiles.insert_one(profile.model_dump())
            logger.info("[%s] created profile for %s", AGENT_LABEL, profile.user_id)
        return profile

    # ----- date-memory NFT records -----

    async def get_nft(self, user_id: str, itinerary_id: str) -> DateMemoryNFT | None:
        doc = await self.nfts.find_one({"user_id": user_id, "itinerary_id": itinerary_id})
        return DateMemoryNFT.model_validate(_with_id(doc)) if doc else None

    async def upsert_nft(self, nft: DateMemoryNFT, status: str | None = None) -> DateMemoryNFT:
        """
        Update the owner's record for this itinerary if one exists, else insert.
        Without an explicit status, new rows are 'pending' and updated rows 'minted'.
        """
        key = {"user_id": nft.user_id, "itinerary_id": nft.itinerary_id}
        existing = await self.nfts.find_one(key)
        if existing:
            fields = nft.model_dump(exclude={"id", "user_id", "itinerary_id", "created_at"})
            fields["status"] = status or "minted"
            fields["updated_at"] = _now()
            await self.nfts.update_one({"_id": existing["_id"]}, {"$set": fields})
            logger.info("[%s] updated nft record %s", AGENT_LABEL, existing["_id"])
            return DateMemoryNFT.model_validate(_with_id({**existing, **fields}))

        nft = nft.model_copy(update={"status": status or "pending"})
        result = await self.nfts.insert_one(nft.model_dump(exclude={"id"}))
        logger.info("[%s] created nft record %s", AGENT_LABEL, result.inserted_id)
        return nft.model_copy(update={"id": str(result.inserted_id)})

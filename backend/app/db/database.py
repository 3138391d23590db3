"""
MongoDB client for the planning store.

One motor client per process, opened on first use. Collection handles are
plain attributes of the database object (``db.planning_sessions``); the
store in ``app.agents.persistence`` is the only reader/writer.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING
from pymongo.server_api import ServerApi

from app.core.config import DATABASE_NAME, MONGODB_URI

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_database = None

# collection -> [(keys, options)]
INDEXES: dict[str, list[tuple[object, dict]]] = {
    "planning_sessions": [([("user_id", ASCENDING), ("updated_at", DESCENDING)], {})],
    "restaurant_options": [("session_id", {})],
    "activity_options": [("session_id", {})],
    "itineraries": [
        ([("user_id", ASCENDING), ("created_at", DESCENDING)], {"name": "user_recent"}),
        ([("user_id", ASCENDING), ("status", ASCENDING)], {"name": "user_status"}),
    ],
    "profiles": [("user_id", {"unique": True})],
    "date_memory_nfts": [
        ([("user_id", ASCENDING), ("itinerary_id", ASCENDING)], {"unique": True, "name": "uniq_user_itinerary"}),
    ],
}


def get_database():
    """Return the configured database, connecting on first call."""
    global _client, _database

    if _database is None:
        if not MONGODB_URI:
            raise ValueError("MONGODB_URI environment variable is not set")
        _client = AsyncIOMotorClient(MONGODB_URI, server_api=ServerApi("1"))
        _database = _client[DATABASE_NAME]
        logger.info("[db] using database %s", DATABASE_NAME)

    return _database


async def init_indexes(db=None) -> None:
    """
    Create the indexes in INDEXES. A failure is logged and startup continues;
    queries still work without them, only slower.
    """
    db = db if db is not None else get_database()
    try:
        for collection, indexes in INDEXES.items():
            for keys, options in indexes:
                await db[collection].create_index(keys, **options)
        logger.info("[db] indexes ready on %d collections", len(INDEXES))
    except Exception as e:
        logger.warning("[db] index creation failed: %s", e)


async def close_database_connection() -> None:
    global _client, _database

    if _client is not None:
        _client.close()
        _client = None
        _database = None
        logger.info("[db] connection closed")


async def test_connection() -> bool:
    """Ping the deployment; False (and an error log) when unreachable or unconfigured."""
    try:
        await get_database().command("ping")
    except Exception as e:
        logger.error("[db] MongoDB ping failed: %s", e)
        return False
    logger.info("[db] MongoDB ping ok")
    return True

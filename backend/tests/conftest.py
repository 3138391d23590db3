import copy
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument

# Allow importing from backend/app
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.agents.orchestrator import PlanningOrchestrator
from app.agents.persistence import PlanningStore
from app.models.yelp import YelpChatResult
from app.agents.transformers import extract_businesses


# ====== In-memory stand-in for the motor collection API ======


def _matches(doc: dict, flt: dict) -> bool:
    return all(doc.get(k) == v for k, v in flt.items())


class FakeCursor:
    def __init__(self, docs: list[dict]):
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    async def to_list(self, length: int | None = None) -> list[dict]:
        docs = [copy.deepcopy(d) for d in self._docs]
        return docs[:length] if length else docs


class FakeCollection:
    def __init__(self) -> None:
        self.docs: list[dict] = []
        self.fail_writes = False
        self.indexes: list[tuple[Any, dict]] = []

    def _check(self) -> None:
        if self.fail_writes:
            raise RuntimeError("write failed")

    async def insert_one(self, doc: dict):
        self._check()
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def insert_many(self, docs: list[dict]):
        ids = [(await self.insert_one(d)).inserted_id for d in docs]
        return SimpleNamespace(inserted_ids=ids)

    async def find_one(self, flt: dict):
        for doc in self.docs:
            if _matches(doc, flt):
                return copy.deepcopy(doc)
        return None

    def find(self, flt: dict | None = None) -> FakeCursor:
        return FakeCursor([d for d in self.docs if _matches(d, flt or {})])

    async def update_one(self, flt: dict, update: dict):
        self._check()
        for doc in self.docs:
            if _matches(doc, flt):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def find_one_and_update(self, flt: dict, update: dict, return_document=ReturnDocument.BEFORE):
        self._check()
        for doc in self.docs:
            if _matches(doc, flt):
                before = copy.deepcopy(doc)
                doc.update(copy.deepcopy(update.get("$set", {})))
                return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before
        return None

    async def delete_one(self, flt: dict):
        self._check()
        for i, doc in enumerate(self.docs):
            if _matches(doc, flt):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def delete_many(self, flt: dict):
        self._check()
        before = len(self.docs)
        self.docs = [d for d in self.docs if not _matches(d, flt)]
        return SimpleNamespace(deleted_count=before - len(self.docs))

    async def create_index(self, keys: Any, **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        return kwargs.get("name", "idx")


class FakeDatabase:
    def __init__(self) -> None:
        self._collections: dict[str, FakeCollection] = {}

    def __getattr__(self, name: str) -> FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._collections.setdefault(name, FakeCollection())

    def __getitem__(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection())


# ====== Yelp payload builders ======


def make_business(
    biz_id: str = "via-carota-new-york",
    name: str = "Via Carota",
    category: tuple[str, str] = ("italian", "Italian"),
    price: str | None = "$$",
    rating: float | None = 4.5,
    distance: float | str | None = 640.0,
    coordinates: tuple[float, float] | None = (40.7332, -74.0036),
    **extra: Any,
) -> dict:
    biz: dict[str, Any] = {
        "id": biz_id,
        "name": name,
        "image_url": f"https://s3-media.fl.yelpcdn.com/bphoto/{biz_id}/o.jpg",
        "rating": rating,
        "review_count": 1280,
        "price": price,
        "categories": [{"alias": category[0], "title": category[1]}],
        "location": {"display_address": ["51 Grove St", "New York, NY 10014"]},
        "distance": distance,
    }
    if coordinates:
        biz["coordinates"] = {"latitude": coordinates[0], "longitude": coordinates[1]}
    biz.update(extra)
    return {k: v for k, v in biz.items() if v is not None}


def chat_result(businesses: list[dict], text: str = "Here you go!", chat_id: str = "chat-1") -> YelpChatResult:
    return YelpChatResult(
        text=text, chat_id=chat_id, businesses=extract_businesses({"businesses": businesses})
    )


# ====== Fixtures ======


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def store(fake_db) -> PlanningStore:
    return PlanningStore(fake_db)


@pytest.fixture
def yelp() -> AsyncMock:
    client = AsyncMock()
    client.chat.return_value = YelpChatResult()
    return client


@pytest.fixture
def orchestrator(store, yelp) -> PlanningOrchestrator:
    return PlanningOrchestrator(store, yelp)

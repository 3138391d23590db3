import time
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.agents.orchestrator import PlanningOrchestrator
from app.agents.persistence import PlanningStore
from app.core import config
from app.main import app
from app.models.yelp import YelpChatResult
from app.router.dependencies import get_orchestrator
from conftest import FakeDatabase, chat_result, make_business


def _token(sub: str = "user-1", **claims) -> str:
    payload = {"sub": sub, "aud": config.JWT_AUDIENCE, "exp": int(time.time()) + 3600, **claims}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def _auth(sub: str = "user-1") -> dict:
    return {"Authorization": f"Bearer {_token(sub)}"}


@pytest.fixture
def yelp_mock() -> AsyncMock:
    client = AsyncMock()
    client.chat.return_value = YelpChatResult()
    return client


@pytest.fixture
def client(yelp_mock):
    orchestrator = PlanningOrchestrator(PlanningStore(FakeDatabase()), yelp_mock)
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


def _start(client, sub: str = "user-1") -> str:
    response = client.post("/plan/start", json={"prompt": "romantic Italian dinner"}, headers=_auth(sub))
    assert response.status_code == 200
    return response.json()["data"]["session_id"]


class TestAuth:
    def test_missing_token(self, client):
        assert client.post("/plan/start", json={"prompt": "x"}).status_code == 401

    def test_bad_signature(self, client):
        forged = jwt.encode({"sub": "user-1", "aud": config.JWT_AUDIENCE}, "wrong-secret", algorithm="HS256")
        response = client.get("/profile/", headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 401

    def test_expired_token(self, client):
        expired = _token(exp=int(time.time()) - 60)
        response = client.get("/profile/", headers={"Authorization": f"Bearer {expired}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    def test_token_without_subject(self, client):
        token = jwt.encode({"aud": config.JWT_AUDIENCE}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
        response = client.get("/profile/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_health_is_public(self, client, monkeypatch):
        monkeypatch.setattr("app.router.system.test_connection", AsyncMock(return_value=True))
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"

    def test_health_reports_degraded_database(self, client, monkeypatch):
        monkeypatch.setattr("app.router.system.test_connection", AsyncMock(return_value=False))
        data = client.get("/health").json()["data"]
        assert (data["status"], data["database"]) == ("degraded", False)


class TestPlanningFlow:
    def test_full_flow(self, client, yelp_mock):
        yelp_mock.chat.return_value = chat_result([make_business()])
        start = client.post(
            "/plan/start",
            json={"prompt": "romantic Italian dinner", "preferences": {"budget": "$$"}},
            headers=_auth(),
        ).json()
        assert start["code"] == 0
        assert start["data"]["stage"] == "restaurants"
        restaurant = start["data"]["restaurants"][0]
        session_id = start["data"]["session_id"]

        yelp_mock.chat.return_value = chat_result(
            [make_business(biz_id="employees-only", name="Employees Only", category=("cocktailbars", "Cocktail Bars"))]
        )
        picked = client.post(
            "/plan/restaurant-select",
            json={"session_id": session_id, "restaurant": restaurant, "time": "7:00 PM"},
            headers=_auth(),
        ).json()
        assert picked["data"]["stage"] == "activities"
        activities = picked["data"]["activities"]
        assert activities[0]["time_window"] == "after"

        chosen = client.post(
            "/plan/activity-select",
            json={"session_id": session_id, "activities": activities},
            headers=_auth(),
        ).json()
        assert chosen["data"]["stage"] == "summary"

        confirmed = client.post(
            "/plan/itinerary-confirm",
            json={"session_id": session_id, "date_label": "Saturday, October 24"},
            headers=_auth(),
        )
        assert confirmed.status_code == 200
        itinerary = confirmed.json()["data"]["itinerary"]
        assert [b["time"] for b in itinerary["timeline_blocks"]] == ["7:00 PM", "8:30 PM"]
        assert itinerary["status"] == "upcoming"

        listed = client.get("/itineraries/", headers=_auth()).json()["data"]
        assert [i["id"] for i in listed["upcoming"]] == [itinerary["id"]]

        rated = client.post(
            f"/itineraries/{itinerary['id']}/feedback", json={"rating": "great"}, headers=_auth()
        ).json()
        assert rated["data"]["itinerary"]["status"] == "past"

    def test_empty_prompt_is_rejected(self, client):
        assert client.post("/plan/start", json={"prompt": ""}, headers=_auth()).status_code == 422

    def test_unknown_session_is_404(self, client):
        response = client.post(
            "/plan/activity-select", json={"session_id": "000000000000000000000000", "skip": True}, headers=_auth()
        )
        assert response.status_code == 404

    def test_unknown_session_with_bad_time_is_404(self, client):
        response = client.post(
            "/plan/restaurant-select",
            json={"session_id": "000000000000000000000000", "restaurant": {"yelp_id": "x", "name": "X"}, "time": "soon"},
            headers=_auth(),
        )
        assert response.status_code == 404

    def test_other_users_session_is_404(self, client):
        session_id = _start(client, "owner")
        response = client.post(
            "/plan/activity-select", json={"session_id": session_id, "skip": True}, headers=_auth("intruder")
        )
        assert response.status_code == 404

    def test_confirm_without_restaurant_is_400(self, client):
        session_id = _start(client)
        response = client.post("/plan/itinerary-confirm", json={"session_id": session_id}, headers=_auth())
        assert response.status_code == 400

    def test_backward_transition_is_409(self, client):
        session_id = _start(client)
        client.post("/plan/activity-select", json={"session_id": session_id, "skip": True}, headers=_auth())
        response = client.post(
            "/plan/restaurant-select",
            json={"session_id": session_id, "restaurant": {"yelp_id": "x", "name": "X"}, "time": "7:00 PM"},
            headers=_auth(),
        )
        assert response.status_code == 409

    def test_unexpected_failure_is_500(self, client, yelp_mock):
        yelp_mock.chat.side_effect = RuntimeError("boom")
        response = client.post("/plan/start", json={"prompt": "dinner"}, headers=_auth())
        assert response.status_code == 500

    def test_chat_refine(self, client, yelp_mock):
        yelp_mock.chat.return_value = chat_result([make_business()], text="Quieter picks", chat_id="c-2")
        data = client.post(
            "/plan/chat", json={"message": "somewhere quieter", "chat_id": "c-1"}, headers=_auth()
        ).json()["data"]
        assert data == {
            "ai_response": "Quieter picks",
            "chat_id": "c-2",
            "restaurants": data["restaurants"],
        }
        assert data["restaurants"][0]["name"] == "Via Carota"


class TestProfileAndNFT:
    def test_profile_round_trip(self, client):
        empty = client.get("/profile/", headers=_auth()).json()["data"]["profile"]
        assert empty["location"] is None

        client.put("/profile/", json={"location": "Brooklyn, NY", "budget": "$$$"}, headers=_auth())
        profile = client.get("/profile/", headers=_auth()).json()["data"]["profile"]
        assert (profile["location"], profile["budget"]) == ("Brooklyn, NY", "$$$")

    def test_invalid_budget_is_422(self, client):
        assert client.put("/profile/", json={"budget": "$$$$$"}, headers=_auth()).status_code == 422

    def test_nft_for_unknown_itinerary_is_404(self, client):
        response = client.post(
            "/nfts/", json={"itinerary_id": "000000000000000000000000", "ipfs_cid": "bafy"}, headers=_auth()
        )
        assert response.status_code == 404

    def test_missing_nft_is_null(self, client):
        assert client.get("/nfts/anything", headers=_auth()).json()["data"] == {"nft": None}

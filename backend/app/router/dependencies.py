"""
Shared router dependencies
"""

from fastapi import Depends, HTTPException

from app.agents.orchestrator import PlanningOrchestrator
from app.agents.persistence import PlanningStore
from app.agents.yelp_client import YelpAIClient
from app.core.errors import PlanningError
from app.db.database import get_database

_yelp_client: YelpAIClient | None = None


def get_yelp_client() -> YelpAIClient:
    global _yelp_client
    if _yelp_client is None:
        _yelp_client = YelpAIClient()
    return _yelp_client


def get_orchestrator(yelp: YelpAIClient = Depends(get_yelp_client)) -> PlanningOrchestrator:
    return PlanningOrchestrator(PlanningStore(get_database()), yelp)


def http_error(error: PlanningError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)

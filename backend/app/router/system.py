"""
Liveness endpoints; no authentication
"""

from fastapi import APIRouter

from app.core.config import APP_NAME, APP_VERSION, ENVIRONMENT
from app.db.database import test_connection
from app.models.common import APIResponse

SERVICE_NAME = "impress-my-date-api"

router = APIRouter(tags=["System"])


@router.get("/", response_model=APIResponse)
def root():
    return APIResponse(data={"name": APP_NAME, "version": APP_VERSION, "docs": "/docs"})


@router.get("/health", response_model=APIResponse)
async def health_check():
    """Reports 'degraded' instead of failing when MongoDB is unreachable."""
    database_ok = await test_connection()
    return APIResponse(
        data={
            "status": "healthy" if database_ok else "degraded",
            "service": SERVICE_NAME,
            "environment": ENVIRONMENT,
            "database": database_ok,
        }
    )

"""
Success envelope returned by every endpoint
"""

from typing import Any

from pydantic import BaseModel, Field


class APIResponse(BaseModel):
    """
    ``{code, msg, data}``. Failures do not use this shape; they come back as
    FastAPI's ``{"detail": ...}`` with a 4xx/5xx status.
    """

    code: int = Field(default=0, description="0 on success")
    msg: str = Field(default="ok")
    data: Any | None = Field(default=None, description="Endpoint-specific payload")

    class Config:
        json_schema_extra = {
            "example": {"code": 0, "msg": "ok", "data": {"session_id": "6720c1f4a8d3b2e1f0a9c871", "stage": "restaurants"}}
        }

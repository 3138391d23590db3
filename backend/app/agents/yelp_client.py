"""
Client for the Yelp Conversational AI API.

A single endpoint accepts a natural-language ``query`` and an optional ``chat_id``
to continue a conversation. Any failure (missing key, transport error, timeout,
non-2xx status, non-JSON body) degrades to an empty ``YelpChatResult`` with
``degraded=True``; callers never see an exception. No retries.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from app.agents.transformers import extract_ai_text, extract_businesses
from app.core.config import YELP_AI_CHAT_URL, YELP_API_KEY, YELP_TIMEOUT_SECONDS
from app.core.errors import UpstreamError
from app.models.yelp import YelpChatResult

logger = logging.getLogger(__name__)

AGENT_LABEL = "yelp_client"


def build_chat_request(query: str, chat_id: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {
        "query": query,
        "request_context": {"return_businesses": True},
    }
    if chat_id:
        body["chat_id"] = chat_id
    return body


class YelpAIClient:
    def __init__(
        self,
        api_key: str | None = YELP_API_KEY,
        url: str = YELP_AI_CHAT_URL,
        timeout_seconds: float = YELP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.timeout_seconds = timeout_seconds
        # injectable for tests (httpx.MockTransport)
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "accept": "application/json",
            "authorization": f"Bearer {self.api_key}",
            "content-type": "application/json",
        }

    async def _post(self, body: dict[str, Any]) -> dict[str, Any]:
        if not self.api_key:
            raise UpstreamError("YELP_API_KEY is not configured")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(self.url, json=body, headers=self._headers())
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Yelp AI timed out after {self.timeout_seconds}s") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Yelp AI request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamError(f"Yelp AI error {response.status_code}: {response.text[:500]}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Yelp AI returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise UpstreamError(f"Yelp AI returned {type(data).__name__}, expected an object")
        return data

    async def chat(self, query: str, chat_id: str | None = None) -> YelpChatResult:
        """
        Send one query. Returns the AI text, the (new or continued) chat id and
        the businesses found in whichever response shape the API used.
        """
        body = build_chat_request(query, chat_id)
        started = time.monotonic()
        logger.info("[%s] query: %s", AGENT_LABEL, query[:200])

        try:
            data = await self._post(body)
        except UpstreamError as e:
            logger.warning("[%s] degrading to empty result: %s", AGENT_LABEL, e)
            return YelpChatResult(chat_id=chat_id, degraded=True)

        businesses = extract_businesses(data)
        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info("[%s] %d businesses in %dms", AGENT_LABEL, len(businesses), elapsed_ms)
        if not businesses:
            logger.debug("[%s] no businesses; response keys=%s", AGENT_LABEL, sorted(data.keys()))

        return YelpChatResult(
            text=extract_ai_text(data),
            chat_id=data.get("chat_id") or chat_id,
            businesses=businesses,
        )

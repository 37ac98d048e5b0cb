"""
Feedback enhancement client.

Sends feedback text to a HuggingFace-style text-generation endpoint and
returns the polished text.  The collaborator is optional: when it is not
configured, slow, failing or returns something unexpected, ``enhance``
returns ``None`` and the caller stores the original content only.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

PROMPT = (
    "Please polish and improve the following professional feedback while "
    "maintaining its original meaning: {content}"
)


class FeedbackEnhancer:
    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url if url is not None else settings.ENHANCER_URL
        self.token = token if token is not None else settings.ENHANCER_TOKEN
        self.timeout = timeout if timeout is not None else settings.ENHANCER_TIMEOUT_SECONDS
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def _request(self, payload: dict[str, Any]) -> Any:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            r = await client.post(self.url, headers=headers, json=payload)  # type: ignore[arg-type]
            r.raise_for_status()
            return r.json()

    @staticmethod
    def _extract(data: Any) -> str | None:
        if isinstance(data, list) and data:
            data = data[0]
        if isinstance(data, dict):
            text = data.get("generated_text")
            if isinstance(text, str) and text.strip():
                return text.strip()
        return None

    async def enhance(self, content: str) -> str | None:
        if not self.enabled:
            return None
        payload = {
            "inputs": PROMPT.format(content=content),
            "parameters": {"max_length": 200, "temperature": 0.7},
        }
        try:
            data = await self._request(payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Feedback enhancement unavailable: %s", e)
            return None
        text = self._extract(data)
        if text is None:
            logger.warning("Feedback enhancement returned an unexpected payload")
        return text


def get_enhancer() -> FeedbackEnhancer:
    """FastAPI dependency; overridden in tests."""
    return FeedbackEnhancer()

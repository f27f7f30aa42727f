"""Google Gemini provider adapter.

The Gemini ``generateContent`` endpoint embeds the model in the URL path.
The API key goes in the ``x-goog-api-key`` header so it never appears in
a request URL (httpx logs request URLs at INFO).
"""

from __future__ import annotations

from typing import Any

from luwi_mcp.providers.base import Provider
from luwi_mcp.types import Vendor

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


class GoogleProvider(Provider):
    """Async adapter for the Gemini generateContent API."""

    vendor = Vendor.GOOGLE

    def _headers(self) -> dict[str, str]:
        return {
            "x-goog-api-key": self._api_key,
            "Content-Type": "application/json",
        }

    async def call(self, model: str, prompt: str) -> dict[str, Any]:
        """Send the prompt as a single text part.

        Args:
            model: Gemini model identifier (e.g. "gemini-pro").
            prompt: The user message content.

        Returns:
            The raw generateContent response body.
        """
        url = f"{GEMINI_API_BASE}/models/{model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        return await self._post_json(url, payload)

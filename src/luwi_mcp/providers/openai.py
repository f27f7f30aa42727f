"""OpenAI provider adapter.

Sends chat completion requests to OpenAI with bearer-token auth.  The
request and response shapes are the OpenAI chat completions format, which
``DeepSeekProvider`` reuses against a different endpoint.

Typical usage::

    async with OpenAIProvider(api_key="sk-...") as provider:
        body = await provider.call("gpt-4o", "Translate 'hello' to French")
        body["choices"][0]["message"]["content"]
"""

from __future__ import annotations

from typing import Any

from luwi_mcp.providers.base import Provider
from luwi_mcp.types import Vendor

OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_TEMPERATURE = 0.7


class OpenAIProvider(Provider):
    """Async adapter for OpenAI-compatible chat completions APIs."""

    vendor = Vendor.OPENAI
    api_url = OPENAI_API_URL

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def call(self, model: str, prompt: str) -> dict[str, Any]:
        """Send the prompt as a single user message.

        Args:
            model: Model identifier (e.g. "gpt-4o").
            prompt: The user message content.

        Returns:
            The raw chat completions response body.
        """
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": DEFAULT_TEMPERATURE,
        }
        return await self._post_json(self.api_url, payload)

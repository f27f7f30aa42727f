"""Claude provider adapter.

Sends requests to the Anthropic Messages API.  Auth uses the ``x-api-key``
header alongside a pinned ``anthropic-version``, and every request must
carry ``max_tokens``.

Typical usage::

    async with ClaudeProvider(api_key="sk-ant-...") as provider:
        body = await provider.call("claude-3-sonnet", "Write a haiku")
        body["content"][0]["text"]
"""

from __future__ import annotations

from typing import Any

from luwi_mcp.providers.base import DEFAULT_TIMEOUT, Provider
from luwi_mcp.types import Vendor

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 4000


class ClaudeProvider(Provider):
    """Async adapter for the Anthropic Messages API.

    Args:
        api_key: Anthropic API key.
        timeout: Request timeout in seconds.  Defaults to 120s.
        max_tokens: Completion token cap sent with every request.
    """

    vendor = Vendor.CLAUDE

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        super().__init__(api_key, timeout)
        self._max_tokens = max_tokens

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

    async def call(self, model: str, prompt: str) -> dict[str, Any]:
        """Send the prompt as a single user message.

        Args:
            model: Claude model identifier.
            prompt: The user message content.

        Returns:
            The raw Messages API response body.
        """
        payload = {
            "model": model,
            "max_tokens": self._max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        return await self._post_json(ANTHROPIC_API_URL, payload)

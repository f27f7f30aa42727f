"""DeepSeek provider adapter.

DeepSeek serves the OpenAI chat completions format, so this adapter only
changes the endpoint and vendor tag.
"""

from __future__ import annotations

from luwi_mcp.providers.openai import OpenAIProvider
from luwi_mcp.types import Vendor

DEEPSEEK_API_URL = "https://api.deepseek.com/v1/chat/completions"


class DeepSeekProvider(OpenAIProvider):
    """Async adapter for the DeepSeek chat completions API."""

    vendor = Vendor.DEEPSEEK
    api_url = DEEPSEEK_API_URL

"""Fallback coordinator: retry a failed call against alternate models.

When the primary call fails and fallback is enabled, alternates are tried
one at a time, in order, through the same ``ApiClient`` path.  The first
success is merged into the original response; if every alternate fails,
the original failed response is returned unchanged.

Alternates come from ``DEFAULT_FALLBACKS`` (or a configured table), keyed
by intent.  ``alternates_for()`` drops the primary selection so the same
model is never retried.
"""

from __future__ import annotations

import logging

from luwi_mcp.client import ApiClient
from luwi_mcp.models import UnifiedResponse
from luwi_mcp.types import Intent, ModelSelection, Vendor

logger = logging.getLogger(__name__)

DEFAULT_FALLBACKS: dict[str, list[ModelSelection]] = {
    Intent.CODE_ANALYSIS: [
        ModelSelection("gpt-4o", Vendor.OPENAI, "Code analysis fallback"),
        ModelSelection("claude-3-sonnet", Vendor.CLAUDE, "Code analysis fallback"),
    ],
    Intent.CREATIVE_WRITING: [
        ModelSelection("gpt-4o", Vendor.OPENAI, "Creative writing fallback"),
        ModelSelection("gemini-pro", Vendor.GOOGLE, "Creative writing fallback"),
    ],
    Intent.DATA_ANALYSIS: [
        ModelSelection("gpt-4o", Vendor.OPENAI, "Data analysis fallback"),
        ModelSelection("claude-3-sonnet", Vendor.CLAUDE, "Data analysis fallback"),
    ],
    Intent.GENERAL_CONVERSATION: [
        ModelSelection("claude-3-haiku", Vendor.CLAUDE, "General conversation fallback"),
        ModelSelection("gemini-pro", Vendor.GOOGLE, "General conversation fallback"),
    ],
    Intent.TRANSLATION: [
        ModelSelection("claude-3-sonnet", Vendor.CLAUDE, "Translation fallback"),
        ModelSelection("gemini-pro", Vendor.GOOGLE, "Translation fallback"),
    ],
}


def alternates_for(
    intent: str,
    primary: ModelSelection,
    table: dict[str, list[ModelSelection]] | None = None,
) -> list[ModelSelection]:
    """Ordered alternates for an intent, excluding the primary selection.

    Unknown intents use the general conversation list, matching the
    router's own fallback.

    Args:
        intent: Request intent.
        primary: Selection already tried.
        table: Intent to ordered alternates.  Defaults to ``DEFAULT_FALLBACKS``.

    Returns:
        Alternates in try order.  May be empty.
    """
    source = DEFAULT_FALLBACKS if table is None else table
    candidates = source.get(intent)
    if candidates is None:
        candidates = source.get(Intent.GENERAL_CONVERSATION, [])
    return [
        alt
        for alt in candidates
        if (alt.model, str(alt.provider)) != (primary.model, str(primary.provider))
    ]


class FallbackCoordinator:
    """Retries failed responses through an ``ApiClient``.

    Args:
        client: An entered ApiClient.
    """

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def run(
        self,
        response: UnifiedResponse,
        prompt: str,
        alternates: list[ModelSelection],
        *,
        enabled: bool = True,
    ) -> UnifiedResponse:
        """Try alternates until one succeeds.

        Args:
            response: The primary call's response.  Mutated in place when
                a fallback succeeds.
            prompt: The prompt to resend.
            alternates: Selections to try, in order.
            enabled: When False, ``response`` is returned untouched.

        Returns:
            ``response``, either unchanged or carrying the fallback's data
            with ``fallback_model`` and ``original_model`` in its metadata.
        """
        if response.success or not enabled or not alternates:
            return response

        original_model = response.data.model
        for alternate in alternates:
            logger.info(
                "Falling back from %s to %s/%s",
                original_model,
                alternate.provider,
                alternate.model,
            )
            attempt = await self._client.call_model(alternate, prompt)
            if not attempt.success:
                continue

            response.data = attempt.data
            response.success = True
            response.error = None
            response.data.metadata.extra.update(
                {"fallback_model": alternate.model, "original_model": original_model}
            )
            return response

        logger.warning(
            "All %d fallback(s) failed for %s", len(alternates), original_model
        )
        return response

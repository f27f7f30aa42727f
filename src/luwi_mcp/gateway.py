"""Gateway entry points: the host-facing request pipeline.

Runs one request end to end: route → dispatch → normalize → optional
sequential fallback.  Successful results are flattened into a plain dict
carrying the response data plus ``operation``, ``original_prompt``, and
``selected_model``.  Only total failure (primary and every alternate, or
primary with fallback disabled) raises, as ``GatewayError``.

``process_batch()`` runs several items in sequence and, with
``continue_on_fail``, turns per-item failures into error records instead
of aborting the batch.

Typical usage::

    import asyncio
    from luwi_mcp.gateway import process_request
    from luwi_mcp.types import ProviderCredentials, RequestDescriptor

    result = asyncio.run(
        process_request(
            RequestDescriptor(intent="translation", complexity="medium"),
            "Translate 'hello' to French",
            ProviderCredentials(openai="sk-..."),
        )
    )
    result["content"]  # "Bonjour"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from luwi_mcp.client import ApiClient
from luwi_mcp.config import Config
from luwi_mcp.fallback import FallbackCoordinator, alternates_for
from luwi_mcp.models import UNKNOWN_ERROR_MESSAGE
from luwi_mcp.router import ModelRouter
from luwi_mcp.types import Complexity, Intent, ProviderCredentials, RequestDescriptor

logger = logging.getLogger(__name__)

OPERATIONS = ("generate", "analyze")


class GatewayError(Exception):
    """Raised when a request cannot produce a successful response.

    Attributes:
        message: Human-readable description.
        item_index: Index of the failing input item, if known.
    """

    def __init__(self, message: str, item_index: int | None = None) -> None:
        self.message = message
        self.item_index = item_index
        super().__init__(message)


@dataclass(frozen=True)
class GatewayItem:
    """One input item for ``process_batch()``.

    Attributes:
        prompt: The prompt to send.  Required.
        intent: Request intent.
        complexity: Request complexity.
        language: Optional language hint.
        operation: "generate" or "analyze"; informational.
        enable_fallback: Per-item fallback switch.  None uses the config default.
    """

    prompt: str
    intent: str = Intent.GENERAL_CONVERSATION.value
    complexity: str = Complexity.MEDIUM.value
    language: str | None = None
    operation: str = "generate"
    enable_fallback: bool | None = None

    def descriptor(self) -> RequestDescriptor:
        """Build the routing descriptor for this item."""
        return RequestDescriptor(
            intent=self.intent,
            complexity=self.complexity,
            language=self.language or None,
            content_type=self.operation,
        )


async def _run(
    client: ApiClient,
    router: ModelRouter,
    config: Config,
    descriptor: RequestDescriptor,
    prompt: str,
    *,
    enable_fallback: bool,
    operation: str,
    item_index: int | None,
) -> dict[str, Any]:
    if not prompt:
        raise GatewayError("Prompt is required", item_index)

    selection = router.select_optimal_model(descriptor)
    response = await client.call_model(selection, prompt)

    if not response.success and enable_fallback:
        alternates = alternates_for(descriptor.intent, selection, config.fallbacks)
        response = await FallbackCoordinator(client).run(
            response, prompt, alternates, enabled=enable_fallback
        )

    if not response.success:
        message = response.error.message if response.error else UNKNOWN_ERROR_MESSAGE
        raise GatewayError(f"AI request failed: {message}", item_index)

    return {
        **response.data.to_dict(),
        "operation": operation,
        "original_prompt": prompt,
        "selected_model": selection.to_dict(),
    }


async def process_request(
    descriptor: RequestDescriptor,
    prompt: str,
    credentials: ProviderCredentials,
    *,
    enable_fallback: bool | None = None,
    operation: str = "generate",
    config: Config | None = None,
    item_index: int | None = None,
) -> dict[str, Any]:
    """Route, dispatch, and normalize a single request.

    Args:
        descriptor: Intent, complexity, and language hint.
        prompt: The prompt to send.
        credentials: Provider API keys for this call.
        enable_fallback: Try alternates if the primary call fails.
            Defaults to ``config.enable_fallback``.
        operation: Caller-level operation name, echoed in the result.
        config: Routing, fallback, pricing, and timeout settings.
        item_index: Index reported on failure.

    Returns:
        Flattened result dict.

    Raises:
        GatewayError: If the prompt is empty or no call succeeded.
    """
    cfg = config or Config()
    fallback = cfg.enable_fallback if enable_fallback is None else enable_fallback
    router = ModelRouter(cfg.routing)
    async with ApiClient(credentials, pricing=cfg.pricing, timeout=cfg.timeout) as client:
        return await _run(
            client,
            router,
            cfg,
            descriptor,
            prompt,
            enable_fallback=fallback,
            operation=operation,
            item_index=item_index,
        )


async def process_batch(
    items: list[GatewayItem],
    credentials: ProviderCredentials,
    *,
    continue_on_fail: bool = False,
    config: Config | None = None,
) -> list[dict[str, Any]]:
    """Process items one at a time, sharing one client.

    Args:
        items: Input items.
        credentials: Provider API keys shared by all items.
        continue_on_fail: Record per-item errors instead of raising.
        config: Routing, fallback, pricing, and timeout settings.

    Returns:
        One dict per item with ``paired_item`` set to its index.  Failed
        items (with ``continue_on_fail``) are ``{"error", "success": False}``.

    Raises:
        GatewayError: On the first failed item unless ``continue_on_fail``.
    """
    cfg = config or Config()
    router = ModelRouter(cfg.routing)
    results: list[dict[str, Any]] = []

    async with ApiClient(credentials, pricing=cfg.pricing, timeout=cfg.timeout) as client:
        for index, item in enumerate(items):
            fallback = item.enable_fallback
            if fallback is None:
                fallback = cfg.enable_fallback
            try:
                result = await _run(
                    client,
                    router,
                    cfg,
                    item.descriptor(),
                    item.prompt,
                    enable_fallback=fallback,
                    operation=item.operation,
                    item_index=index,
                )
            except GatewayError as exc:
                if not continue_on_fail:
                    raise
                logger.warning("Item %d failed: %s", index, exc.message)
                results.append({"error": exc.message, "success": False, "paired_item": index})
                continue
            results.append({**result, "paired_item": index})

    return results

"""API client: the single dispatch point for routed model calls.

``ApiClient`` owns the provider credentials, opens one adapter per
configured provider, dispatches a ``ModelSelection`` to the matching
adapter, and feeds whatever comes back (body or exception) through the
``ResponseNormalizer``.  ``call_model()`` therefore always returns a
complete ``UnifiedResponse``: an unknown provider, a missing API key, and
a provider outage all surface the same way, as ``success=False``.

Cancellation is not absorbed: ``asyncio.CancelledError`` propagates so a
cancelled request aborts its network call.

Typical usage::

    import asyncio
    from luwi_mcp.client import ApiClient
    from luwi_mcp.types import ModelSelection, ProviderCredentials

    async def main():
        creds = ProviderCredentials(openai="sk-...")
        async with ApiClient(creds) as client:
            resp = await client.call_model(
                ModelSelection(model="gpt-4o", provider="openai"), "Hello",
            )

    asyncio.run(main())
"""

from __future__ import annotations

import logging
import time
from typing import Any

from luwi_mcp.models import UnifiedResponse
from luwi_mcp.normalizer import UNSUPPORTED_PROVIDER_CODE, ResponseNormalizer
from luwi_mcp.pricing import PricingTable
from luwi_mcp.providers import PROVIDER_CLASSES, Provider
from luwi_mcp.providers.base import DEFAULT_TIMEOUT
from luwi_mcp.types import ModelSelection, ProviderCredentials, Vendor

logger = logging.getLogger(__name__)

MISSING_API_KEY_CODE = "MISSING_API_KEY"


class UnsupportedProviderError(Exception):
    """Raised internally when a selection names a provider with no adapter."""

    code = UNSUPPORTED_PROVIDER_CODE

    def __init__(self, provider: str) -> None:
        self.provider = provider
        self.message = f"Unsupported provider: {provider}"
        super().__init__(self.message)


class MissingCredentialsError(Exception):
    """Raised internally when a supported provider has no API key."""

    code = MISSING_API_KEY_CODE

    def __init__(self, provider: str) -> None:
        self.provider = provider
        self.message = f"No API key configured for provider '{provider}'"
        super().__init__(self.message)


class ApiClient:
    """Dispatches model selections to provider adapters.

    Designed to be used as an async context manager: entering opens an
    adapter (and its connection pool) for every provider with a key.

    Args:
        credentials: API keys per provider.  Never logged.
        pricing: Rate tables for cost estimation.
        timeout: Per-request timeout in seconds for every adapter.
    """

    def __init__(
        self,
        credentials: ProviderCredentials,
        *,
        pricing: PricingTable | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._credentials = credentials
        self._timeout = timeout
        self._normalizer = ResponseNormalizer(pricing)
        self._providers: dict[Vendor, Provider] = {}
        self._entered = False

    async def __aenter__(self) -> ApiClient:
        """Open an adapter for each provider that has credentials."""
        try:
            for vendor in self._credentials.configured():
                key = self._credentials.get(vendor) or ""
                provider = PROVIDER_CLASSES[vendor](api_key=key, timeout=self._timeout)
                await provider.__aenter__()
                self._providers[vendor] = provider
        except BaseException:
            await self._close_providers()
            raise
        self._entered = True
        logger.debug("Opened providers: %s", ", ".join(v.value for v in self._providers))
        return self

    async def __aexit__(self, *exc: Any) -> None:
        """Close all open adapters."""
        await self._close_providers()
        self._entered = False

    async def _close_providers(self) -> None:
        for provider in self._providers.values():
            await provider.__aexit__(None, None, None)
        self._providers.clear()

    async def call_model(self, selection: ModelSelection, prompt: str) -> UnifiedResponse:
        """Call the selected model and normalize the outcome.

        Args:
            selection: Routed (model, provider) pair.
            prompt: The user message content.

        Returns:
            UnifiedResponse; failures are returned, not raised.

        Raises:
            RuntimeError: If the client is used outside a context manager.
        """
        if not self._entered:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        start_time = time.monotonic()
        provider_name = str(selection.provider)
        raw: dict[str, Any] | BaseException

        try:
            provider = self._get_provider(provider_name)
            raw = await provider.call(selection.model, prompt)
        except Exception as exc:
            raw = exc

        response = self._normalizer.normalize(provider_name, raw, selection.model, start_time)
        if response.error is None:
            logger.info(
                "%s/%s succeeded in %sms",
                provider_name,
                selection.model,
                response.data.metadata.latency_ms,
            )
        else:
            logger.warning(
                "%s/%s failed: [%s] %s",
                provider_name,
                selection.model,
                response.error.code,
                response.error.message,
            )
        return response

    def _get_provider(self, provider_name: str) -> Provider:
        if provider_name not in PROVIDER_CLASSES:
            raise UnsupportedProviderError(provider_name)
        provider = self._providers.get(Vendor(provider_name))
        if provider is None:
            raise MissingCredentialsError(provider_name)
        return provider

"""Abstract base class for LLM provider adapters.

Defines the ``Provider`` interface that all vendor-specific adapters
follow.  An adapter builds its vendor's wire request, issues exactly one
HTTP call, and returns the parsed JSON body untouched.  It does not
interpret the body: deciding whether a 200 response actually carries
content is the normalizer's job.

Transport-level failures (timeout, connection error, non-2xx status,
unparseable body) raise ``ProviderError``.  No retries happen here.

Subclasses set ``vendor`` and implement ``_headers()`` and ``call()``.
The shared ``__aenter__``/``__aexit__`` manage one ``httpx.AsyncClient``
per adapter for connection pooling.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from luwi_mcp.types import Vendor

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0  # seconds


class ProviderError(Exception):
    """Raised when a provider call fails at the transport level.

    Attributes:
        code: Machine-readable code ("TIMEOUT", "NETWORK_ERROR",
            "HTTP_<status>", "INVALID_RESPONSE").
        message: Human-readable description.
        status_code: HTTP status code, if a response was received.
        details: Structured context such as the provider's error body.
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class Provider(ABC):
    """Base class for all provider adapters.

    Designed as an async context manager for connection lifecycle.

    Args:
        api_key: Provider API key.
        timeout: Request timeout in seconds.  Defaults to 120s.

    Raises:
        ValueError: If ``api_key`` is empty.
    """

    vendor: Vendor

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        if not api_key:
            raise ValueError(
                f"{self.vendor.value} API key is required. Set it in the environment "
                "or add it to ~/.luwi-mcp/config.toml"
            )
        self._api_key = api_key
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @abstractmethod
    def _headers(self) -> dict[str, str]:
        """Default headers for every request, including auth where applicable."""
        ...

    @abstractmethod
    async def call(self, model: str, prompt: str) -> dict[str, Any]:
        """Send a single-prompt completion request.

        Args:
            model: Provider-specific model identifier.
            prompt: The user message content.

        Returns:
            The provider's parsed JSON response body.

        Raises:
            ProviderError: On timeout, network failure, non-2xx status,
                or a body that is not a JSON object.
            RuntimeError: If the adapter is used outside a context manager.
        """
        ...

    async def __aenter__(self) -> Provider:
        """Open the underlying HTTP connection pool."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            headers=self._headers(),
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        """Close the underlying HTTP connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON payload and return the parsed JSON object.

        Args:
            url: Endpoint URL.
            payload: Request body.

        Returns:
            Parsed response body.

        Raises:
            ProviderError: See ``call()``.
            RuntimeError: If the adapter is used outside a context manager.
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        try:
            resp = await self._client.post(url, json=payload)
        except httpx.TimeoutException as exc:
            raise ProviderError(
                "TIMEOUT",
                f"Request timed out after {self._timeout}s",
                details={"type": type(exc).__name__},
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                "NETWORK_ERROR",
                f"{self.vendor.value} request failed: {exc}",
                details={"type": type(exc).__name__},
            ) from exc

        if not 200 <= resp.status_code < 300:
            detail = _extract_error(resp)
            logger.debug("%s returned HTTP %s", self.vendor.value, resp.status_code)
            raise ProviderError(
                f"HTTP_{resp.status_code}",
                f"HTTP {resp.status_code}: {detail}",
                status_code=resp.status_code,
                details={"body": detail},
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError(
                "INVALID_RESPONSE",
                f"{self.vendor.value} returned a non-JSON body",
                status_code=resp.status_code,
            ) from exc

        if not isinstance(data, dict):
            raise ProviderError(
                "INVALID_RESPONSE",
                f"{self.vendor.value} returned {type(data).__name__}, expected an object",
                status_code=resp.status_code,
            )
        return data


def _extract_error(resp: httpx.Response) -> str:
    """Extract error detail from a non-2xx API response.

    All four providers nest a ``message`` under ``error``.

    Args:
        resp: The httpx response object.

    Returns:
        Human-readable error description.
    """
    try:
        body = resp.json()
        error = body.get("error", {})
        if isinstance(error, dict):
            return str(error.get("message", str(body)))
        return str(error)
    except Exception:
        return str(resp.text[:500])

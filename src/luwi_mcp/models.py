"""Unified response envelope for all providers.

Every provider call, successful or not, ends as a ``UnifiedResponse``.
Exactly one of two states holds: ``success=True`` with ``error=None``, or
``success=False`` with an ``error`` populated and ``data.content == ""``.
Use the ``success_response()`` / ``failure_response()`` constructors to
keep that invariant.

Typical usage::

    from luwi_mcp.models import UnifiedResponse

    resp = UnifiedResponse.success_response(
        content="Bonjour",
        model="gpt-4o",
        provider="openai",
        latency_ms=812,
        tokens_used=12,
    )
    resp.to_dict()["data"]["metadata"]["tokens_used"]  # 12
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

UNKNOWN_ERROR_CODE = "UNKNOWN_ERROR"
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass
class ResponseMetadata:
    """Timing, usage, and cost for one call.

    Attributes:
        latency_ms: Wall-clock time from dispatch start to normalization.
        tokens_used: Total tokens, if the provider reported usage.
        cost: Estimated USD cost, if usage and pricing were available.
        model_version: Provider-echoed model ID, or the requested model.
        extra: Additional markers (``fallback_model``, ``original_model``).
    """

    latency_ms: int
    tokens_used: int | None = None
    cost: float | None = None
    model_version: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize, omitting optional fields the provider did not surface.

        Returns:
            Dictionary with ``latency_ms`` always present.
        """
        result: dict[str, Any] = {}
        if self.tokens_used is not None:
            result["tokens_used"] = self.tokens_used
        if self.cost is not None:
            result["cost"] = self.cost
        result["latency_ms"] = self.latency_ms
        if self.model_version is not None:
            result["model_version"] = self.model_version
        result.update(self.extra)
        return result


@dataclass
class ResponseData:
    """Generated content plus the selection that produced it.

    Attributes:
        content: Generated text, empty on failure.
        model: Model identifier used for this call.
        provider: Provider key used for this call.
        metadata: Latency, usage, and cost.
        timestamp: ISO-8601 instant of response construction (UTC).
    """

    content: str
    model: str
    provider: str
    metadata: ResponseMetadata
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary.

        Returns:
            Dictionary with content, model, provider, timestamp, metadata.
        """
        return {
            "content": self.content,
            "model": self.model,
            "provider": str(self.provider),
            "timestamp": self.timestamp,
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class ResponseError:
    """Error detail attached to a failed response.

    Attributes:
        code: Machine-readable error code (e.g. "HTTP_429", "TIMEOUT").
        message: Human-readable description, never empty.
        details: Structured context (exception type, status code, body).
    """

    code: str = UNKNOWN_ERROR_CODE
    message: str = UNKNOWN_ERROR_MESSAGE
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary.

        Returns:
            Dictionary with code, message, and details.
        """
        return {"code": self.code, "message": self.message, "details": self.details}


@dataclass
class UnifiedResponse:
    """Normalized result of one provider call attempt.

    Attributes:
        success: Whether the call produced content.
        data: Content, selection echo, and metadata.
        error: Populated only when ``success`` is False.
    """

    success: bool
    data: ResponseData
    error: ResponseError | None = None

    @classmethod
    def success_response(
        cls,
        *,
        content: str,
        model: str,
        provider: str,
        latency_ms: int,
        tokens_used: int | None = None,
        cost: float | None = None,
        model_version: str | None = None,
    ) -> UnifiedResponse:
        """Build a successful response."""
        metadata = ResponseMetadata(
            latency_ms=latency_ms,
            tokens_used=tokens_used,
            cost=cost,
            model_version=model_version,
        )
        return cls(
            success=True,
            data=ResponseData(content=content, model=model, provider=provider, metadata=metadata),
        )

    @classmethod
    def failure_response(
        cls,
        *,
        model: str,
        provider: str,
        latency_ms: int,
        code: str | None = None,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> UnifiedResponse:
        """Build a failed response with empty content.

        Missing or empty ``code``/``message`` fall back to
        ``UNKNOWN_ERROR`` / ``An unknown error occurred``.
        """
        return cls(
            success=False,
            data=ResponseData(
                content="",
                model=model,
                provider=provider,
                metadata=ResponseMetadata(latency_ms=latency_ms),
            ),
            error=ResponseError(
                code=code or UNKNOWN_ERROR_CODE,
                message=message or UNKNOWN_ERROR_MESSAGE,
                details=details or {},
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape.

        Returns:
            Dictionary with ``success`` and ``data``, plus ``error`` on failure.
        """
        result: dict[str, Any] = {"success": self.success, "data": self.data.to_dict()}
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result

"""Response normalizer: provider payloads and errors into ``UnifiedResponse``.

Each provider has an extractor that pulls the generated text, token usage,
and echoed model ID out of that provider's success shape.  Extractors
never raise; they return an ``Extraction`` that is either ok or carries
the error detail.  ``ResponseNormalizer.normalize()`` then builds the
envelope, computing latency and an estimated cost.

The normalizer is the terminal point for every failure in a call:
transport errors raised by adapters, unexpected response shapes, error
objects embedded in a 200 body, and unknown providers all come out as a
``UnifiedResponse`` with ``success=False``.

Typical usage::

    import time
    from luwi_mcp.normalizer import ResponseNormalizer

    normalizer = ResponseNormalizer()
    start = time.monotonic()
    resp = normalizer.normalize("openai", body, "gpt-4o", start)
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from luwi_mcp.models import ResponseError, UnifiedResponse
from luwi_mcp.pricing import PricingTable, compute_cost
from luwi_mcp.types import Vendor

SHAPE_ERROR_CODE = "INVALID_RESPONSE_SHAPE"
PROVIDER_ERROR_CODE = "PROVIDER_ERROR"
UNSUPPORTED_PROVIDER_CODE = "UNSUPPORTED_PROVIDER"


@dataclass(frozen=True)
class Extraction:
    """Outcome of pulling fields out of one provider payload.

    Either ``error`` is None and the content fields are meaningful, or
    ``error`` describes why extraction failed.

    Attributes:
        content: Generated text.
        tokens_used: Total tokens, if reported.
        input_tokens: Prompt tokens, for providers that split usage.
        output_tokens: Completion tokens, for providers that split usage.
        model_version: Model ID echoed by the provider, if any.
        error: Failure detail, None on success.
    """

    content: str = ""
    tokens_used: int | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    model_version: str | None = None
    error: ResponseError | None = None

    @property
    def ok(self) -> bool:
        """True when extraction succeeded."""
        return self.error is None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _shape_error(vendor: str, path: str, exc: Exception) -> Extraction:
    return Extraction(
        error=ResponseError(
            code=SHAPE_ERROR_CODE,
            message=f"Unexpected {vendor} response: missing or invalid '{path}'",
            details={"type": type(exc).__name__, "path": path},
        )
    )


def _embedded_error(body: dict[str, Any]) -> Extraction | None:
    """Detect an error object returned inside a 200 response."""
    error = body.get("error")
    if not error:
        return None
    if isinstance(error, dict):
        code = error.get("code") or error.get("status") or error.get("type")
        message = error.get("message")
        return Extraction(
            error=ResponseError(
                code=str(code) if code else PROVIDER_ERROR_CODE,
                message=str(message) if message else f"Provider returned an error: {error}",
                details={"error": error},
            )
        )
    return Extraction(
        error=ResponseError(code=PROVIDER_ERROR_CODE, message=str(error), details={"error": error})
    )


def _require_text(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected text, got {type(value).__name__}")
    return value


def extract_chat_completions(body: dict[str, Any], vendor: str = Vendor.OPENAI) -> Extraction:
    """Extract from the OpenAI chat completions shape (OpenAI, DeepSeek).

    Args:
        body: Parsed response body.
        vendor: Provider name for error messages.

    Returns:
        Extraction with ``choices[0].message.content`` and ``usage.total_tokens``.
    """
    embedded = _embedded_error(body)
    if embedded:
        return embedded
    try:
        content = _require_text(body["choices"][0]["message"]["content"])
    except (KeyError, IndexError, TypeError) as exc:
        return _shape_error(vendor, "choices[0].message.content", exc)

    usage = body.get("usage") or {}
    return Extraction(
        content=content,
        tokens_used=_as_int(usage.get("total_tokens")) if isinstance(usage, dict) else None,
        model_version=body.get("model") or None,
    )


def extract_claude(body: dict[str, Any]) -> Extraction:
    """Extract from the Anthropic Messages shape.

    Args:
        body: Parsed response body.

    Returns:
        Extraction with ``content[0].text`` and the input/output token split.
    """
    embedded = _embedded_error(body)
    if embedded:
        return embedded
    try:
        content = _require_text(body["content"][0]["text"])
    except (KeyError, IndexError, TypeError) as exc:
        return _shape_error(Vendor.CLAUDE, "content[0].text", exc)

    usage = body.get("usage") or {}
    if not isinstance(usage, dict):
        usage = {}
    input_tokens = _as_int(usage.get("input_tokens"))
    output_tokens = _as_int(usage.get("output_tokens"))
    tokens_used = None
    if input_tokens is not None or output_tokens is not None:
        tokens_used = (input_tokens or 0) + (output_tokens or 0)

    return Extraction(
        content=content,
        tokens_used=tokens_used,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        model_version=body.get("model") or None,
    )


def extract_gemini(body: dict[str, Any]) -> Extraction:
    """Extract from the Gemini generateContent shape.

    Args:
        body: Parsed response body.

    Returns:
        Extraction with ``candidates[0].content.parts[0].text`` and
        ``usageMetadata.totalTokenCount``.
    """
    embedded = _embedded_error(body)
    if embedded:
        return embedded
    try:
        content = _require_text(body["candidates"][0]["content"]["parts"][0]["text"])
    except (KeyError, IndexError, TypeError) as exc:
        return _shape_error(Vendor.GOOGLE, "candidates[0].content.parts[0].text", exc)

    usage = body.get("usageMetadata") or {}
    return Extraction(
        content=content,
        tokens_used=_as_int(usage.get("totalTokenCount")) if isinstance(usage, dict) else None,
        model_version=body.get("modelVersion") or None,
    )


_EXTRACTORS: dict[str, Callable[[dict[str, Any]], Extraction]] = {
    Vendor.OPENAI: lambda body: extract_chat_completions(body, Vendor.OPENAI),
    Vendor.CLAUDE: extract_claude,
    Vendor.GOOGLE: extract_gemini,
    Vendor.DEEPSEEK: lambda body: extract_chat_completions(body, Vendor.DEEPSEEK),
}


def error_from_exception(exc: BaseException) -> ResponseError:
    """Convert a raised error into a ``ResponseError``.

    Reads ``code``/``message``/``details``/``status_code`` attributes when
    the exception carries them (``ProviderError`` does).

    Args:
        exc: The caught exception.

    Returns:
        ResponseError with defaults applied for missing code or message.
    """
    code = getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc)
    details: dict[str, Any] = {"type": type(exc).__name__}
    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        details["status_code"] = status_code
    extra = getattr(exc, "details", None)
    if isinstance(extra, dict):
        details.update(extra)
    default = ResponseError()
    return ResponseError(
        code=code if isinstance(code, str) and code else default.code,
        message=message or default.message,
        details=details,
    )


class ResponseNormalizer:
    """Builds ``UnifiedResponse`` envelopes from raw provider output.

    Args:
        pricing: Rate tables for cost estimation.  Defaults to the
            built-in placeholder rates.
    """

    def __init__(self, pricing: PricingTable | None = None) -> None:
        self._pricing = pricing or PricingTable()

    def normalize(
        self,
        vendor: str,
        raw: dict[str, Any] | BaseException,
        model: str,
        start_time: float,
    ) -> UnifiedResponse:
        """Normalize one call outcome.  Never raises.

        Args:
            vendor: Provider that produced ``raw``.
            raw: Parsed response body, or the exception the call raised.
            model: Requested model identifier.
            start_time: ``time.monotonic()`` reading taken before dispatch.

        Returns:
            A complete UnifiedResponse.
        """
        latency_ms = max(0, int((time.monotonic() - start_time) * 1000))

        if isinstance(raw, BaseException):
            return self._failure(vendor, model, latency_ms, error_from_exception(raw))

        extractor = _EXTRACTORS.get(vendor)
        if extractor is None:
            return self._failure(
                vendor,
                model,
                latency_ms,
                ResponseError(
                    code=UNSUPPORTED_PROVIDER_CODE,
                    message=f"Unsupported provider: {vendor}",
                ),
            )

        if not isinstance(raw, dict):
            return self._failure(
                vendor,
                model,
                latency_ms,
                ResponseError(
                    code=SHAPE_ERROR_CODE,
                    message=f"Unexpected {vendor} response: expected an object, "
                    f"got {type(raw).__name__}",
                ),
            )

        extraction = extractor(raw)
        if extraction.error is not None:
            return self._failure(vendor, model, latency_ms, extraction.error)

        pricing = self._pricing.get_pricing(vendor, model)
        cost = compute_cost(
            pricing,
            total_tokens=extraction.tokens_used,
            input_tokens=extraction.input_tokens,
            output_tokens=extraction.output_tokens,
        )
        return UnifiedResponse.success_response(
            content=extraction.content,
            model=model,
            provider=str(vendor),
            latency_ms=latency_ms,
            tokens_used=extraction.tokens_used,
            cost=cost,
            model_version=extraction.model_version or model,
        )

    @staticmethod
    def _failure(
        vendor: str,
        model: str,
        latency_ms: int,
        error: ResponseError,
    ) -> UnifiedResponse:
        return UnifiedResponse.failure_response(
            model=model,
            provider=str(vendor),
            latency_ms=latency_ms,
            code=error.code,
            message=error.message,
            details=error.details,
        )

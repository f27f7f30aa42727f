"""Tests for the provider adapters.

Covers: construction validation, async context manager lifecycle, auth
header placement per provider, request payload shapes,
transport error mapping (timeout, network, HTTP status, non-JSON body),
and the PROVIDER_CLASSES registry.
"""

from __future__ import annotations

import logging
import sys
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from luwi_mcp.providers import (
    PROVIDER_CLASSES,
    ClaudeProvider,
    DeepSeekProvider,
    GoogleProvider,
    OpenAIProvider,
    ProviderError,
)
from luwi_mcp.providers.claude import ANTHROPIC_API_URL, ANTHROPIC_VERSION
from luwi_mcp.providers.deepseek import DEEPSEEK_API_URL
from luwi_mcp.providers.google import GEMINI_API_BASE
from luwi_mcp.providers.openai import OPENAI_API_URL
from luwi_mcp.types import Vendor

ALL_PROVIDERS = [OpenAIProvider, ClaudeProvider, GoogleProvider, DeepSeekProvider]


def _mock_response(status_code: int = 200, body: Any = None) -> MagicMock:
    """Build a mock httpx.Response."""
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.json.return_value = body if body is not None else {}
    resp.text = str(body)
    return resp


def _payload(mock_post: AsyncMock) -> dict[str, Any]:
    return mock_post.call_args.kwargs["json"]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    @pytest.mark.parametrize("cls", ALL_PROVIDERS)
    def test_valid_api_key(self, cls: type) -> None:
        provider = cls(api_key="sk-test")
        assert provider._api_key == "sk-test"

    @pytest.mark.parametrize("cls", ALL_PROVIDERS)
    def test_empty_api_key_raises(self, cls: type) -> None:
        with pytest.raises(ValueError, match="API key is required"):
            cls(api_key="")

    def test_default_timeout(self) -> None:
        assert OpenAIProvider(api_key="sk-test")._timeout == 120.0

    def test_custom_timeout(self) -> None:
        assert GoogleProvider(api_key="g-test", timeout=30.0)._timeout == 30.0

    def test_claude_default_max_tokens(self) -> None:
        assert ClaudeProvider(api_key="sk-ant-test")._max_tokens == 4000

    def test_claude_custom_max_tokens(self) -> None:
        assert ClaudeProvider(api_key="sk-ant-test", max_tokens=1024)._max_tokens == 1024


class TestRegistry:
    def test_every_vendor_has_an_adapter(self) -> None:
        assert set(PROVIDER_CLASSES) == set(Vendor)

    def test_adapter_vendor_tags_match(self) -> None:
        for vendor, cls in PROVIDER_CLASSES.items():
            assert cls.vendor == vendor


# ---------------------------------------------------------------------------
# Async context manager and headers
# ---------------------------------------------------------------------------


@pytest.mark.skipif(
    sys.platform == "win32",
    reason="Slow asyncio overhead on Windows, validated on Ubuntu CI",
)
class TestAsyncContextManager:
    @pytest.mark.asyncio
    async def test_enter_creates_client(self) -> None:
        provider = OpenAIProvider(api_key="sk-test")
        assert provider._client is None
        async with provider:
            assert provider._client is not None

    @pytest.mark.asyncio
    async def test_exit_closes_client(self) -> None:
        provider = ClaudeProvider(api_key="sk-ant-test")
        async with provider:
            pass
        assert provider._client is None

    @pytest.mark.asyncio
    async def test_call_outside_context_raises(self) -> None:
        provider = DeepSeekProvider(api_key="sk-test")
        with pytest.raises(RuntimeError, match="context manager"):
            await provider.call("deepseek-coder", "Hello")

    @pytest.mark.asyncio
    async def test_openai_bearer_header(self) -> None:
        async with OpenAIProvider(api_key="sk-test") as provider:
            assert provider._client is not None
            assert provider._client.headers["authorization"] == "Bearer sk-test"

    @pytest.mark.asyncio
    async def test_deepseek_bearer_header(self) -> None:
        async with DeepSeekProvider(api_key="sk-ds") as provider:
            assert provider._client is not None
            assert provider._client.headers["authorization"] == "Bearer sk-ds"

    @pytest.mark.asyncio
    async def test_claude_headers(self) -> None:
        async with ClaudeProvider(api_key="sk-ant-test") as provider:
            assert provider._client is not None
            headers = provider._client.headers
            assert headers["x-api-key"] == "sk-ant-test"
            assert headers["anthropic-version"] == ANTHROPIC_VERSION
            assert "authorization" not in headers

    @pytest.mark.asyncio
    async def test_google_key_header(self) -> None:
        async with GoogleProvider(api_key="g-test") as provider:
            assert provider._client is not None
            assert provider._client.headers["x-goog-api-key"] == "g-test"
            assert "authorization" not in provider._client.headers
            assert "x-api-key" not in provider._client.headers


# ---------------------------------------------------------------------------
# Request shapes
# ---------------------------------------------------------------------------


@pytest.mark.skipif(
    sys.platform == "win32",
    reason="Slow asyncio overhead on Windows, validated on Ubuntu CI",
)
class TestRequestShapes:
    @pytest.mark.asyncio
    async def test_openai_payload(self) -> None:
        body = {"choices": [{"message": {"content": "Bonjour"}}]}
        async with OpenAIProvider(api_key="sk-test") as provider:
            assert provider._client is not None
            mock_post = AsyncMock(return_value=_mock_response(body=body))
            provider._client.post = mock_post

            result = await provider.call("gpt-4o", "Translate 'hello' to French")

        assert result == body
        assert mock_post.call_args.args[0] == OPENAI_API_URL
        assert _payload(mock_post) == {
            "model": "gpt-4o",
            "messages": [{"role": "user", "content": "Translate 'hello' to French"}],
            "temperature": 0.7,
        }

    @pytest.mark.asyncio
    async def test_deepseek_uses_own_endpoint(self) -> None:
        async with DeepSeekProvider(api_key="sk-test") as provider:
            assert provider._client is not None
            mock_post = AsyncMock(return_value=_mock_response(body={"choices": []}))
            provider._client.post = mock_post

            await provider.call("deepseek-coder", "Review this")

        assert mock_post.call_args.args[0] == DEEPSEEK_API_URL
        assert _payload(mock_post)["model"] == "deepseek-coder"

    @pytest.mark.asyncio
    async def test_claude_payload(self) -> None:
        async with ClaudeProvider(api_key="sk-ant-test") as provider:
            assert provider._client is not None
            mock_post = AsyncMock(return_value=_mock_response(body={"content": []}))
            provider._client.post = mock_post

            await provider.call("claude-3-sonnet", "Write a haiku")

        assert mock_post.call_args.args[0] == ANTHROPIC_API_URL
        assert _payload(mock_post) == {
            "model": "claude-3-sonnet",
            "max_tokens": 4000,
            "messages": [{"role": "user", "content": "Write a haiku"}],
        }

    @pytest.mark.asyncio
    async def test_google_model_in_path_and_no_key_in_url(self) -> None:
        async with GoogleProvider(api_key="g-test") as provider:
            assert provider._client is not None
            mock_post = AsyncMock(return_value=_mock_response(body={"candidates": []}))
            provider._client.post = mock_post

            await provider.call("gemini-pro", "Summarize")

        expected = f"{GEMINI_API_BASE}/models/gemini-pro:generateContent"
        assert mock_post.call_args.args[0] == expected
        assert "params" not in mock_post.call_args.kwargs
        assert _payload(mock_post) == {"contents": [{"parts": [{"text": "Summarize"}]}]}

    @pytest.mark.asyncio
    async def test_body_returned_uninterpreted(self) -> None:
        """A 200 body with an embedded error is returned, not raised."""
        body = {"error": {"message": "quota"}}
        async with OpenAIProvider(api_key="sk-test") as provider:
            assert provider._client is not None
            provider._client.post = AsyncMock(return_value=_mock_response(body=body))
            assert await provider.call("gpt-4o", "Hi") == body


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------


@pytest.mark.skipif(
    sys.platform == "win32",
    reason="Slow asyncio overhead on Windows, validated on Ubuntu CI",
)
class TestTransportErrors:
    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        async with OpenAIProvider(api_key="sk-test", timeout=5.0) as provider:
            assert provider._client is not None
            provider._client.post = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))
            with pytest.raises(ProviderError) as exc_info:
                await provider.call("gpt-4o", "Hi")

        assert exc_info.value.code == "TIMEOUT"
        assert "5.0s" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        async with ClaudeProvider(api_key="sk-ant-test") as provider:
            assert provider._client is not None
            provider._client.post = AsyncMock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(ProviderError) as exc_info:
                await provider.call("claude-3-sonnet", "Hi")

        assert exc_info.value.code == "NETWORK_ERROR"
        assert "refused" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_http_error_with_provider_message(self) -> None:
        body = {"error": {"message": "Rate limit exceeded", "type": "rate_limit"}}
        async with OpenAIProvider(api_key="sk-test") as provider:
            assert provider._client is not None
            provider._client.post = AsyncMock(return_value=_mock_response(429, body))
            with pytest.raises(ProviderError) as exc_info:
                await provider.call("gpt-4o", "Hi")

        err = exc_info.value
        assert err.code == "HTTP_429"
        assert err.status_code == 429
        assert "Rate limit exceeded" in err.message

    @pytest.mark.asyncio
    async def test_http_error_non_json_body(self) -> None:
        resp = _mock_response(502)
        resp.json.side_effect = ValueError("not json")
        resp.text = "<html>Bad Gateway</html>"
        async with GoogleProvider(api_key="g-test") as provider:
            assert provider._client is not None
            provider._client.post = AsyncMock(return_value=resp)
            with pytest.raises(ProviderError) as exc_info:
                await provider.call("gemini-pro", "Hi")

        assert exc_info.value.code == "HTTP_502"
        assert "Bad Gateway" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_success_with_non_json_body(self) -> None:
        resp = _mock_response(200)
        resp.json.side_effect = ValueError("not json")
        async with DeepSeekProvider(api_key="sk-test") as provider:
            assert provider._client is not None
            provider._client.post = AsyncMock(return_value=resp)
            with pytest.raises(ProviderError) as exc_info:
                await provider.call("deepseek-coder", "Hi")

        assert exc_info.value.code == "INVALID_RESPONSE"

    @pytest.mark.asyncio
    async def test_success_with_non_object_body(self) -> None:
        async with OpenAIProvider(api_key="sk-test") as provider:
            assert provider._client is not None
            provider._client.post = AsyncMock(return_value=_mock_response(body=["a", "b"]))
            with pytest.raises(ProviderError) as exc_info:
                await provider.call("gpt-4o", "Hi")

        assert exc_info.value.code == "INVALID_RESPONSE"


class TestProviderError:
    def test_attributes(self) -> None:
        err = ProviderError("HTTP_500", "boom", status_code=500, details={"body": "x"})
        assert err.code == "HTTP_500"
        assert err.message == "boom"
        assert err.status_code == 500
        assert err.details == {"body": "x"}
        assert str(err) == "boom"

    def test_details_default_empty(self) -> None:
        assert ProviderError("TIMEOUT", "slow").details == {}


# ---------------------------------------------------------------------------
# Credentials in logs
# ---------------------------------------------------------------------------


class TestCredentialsNotLogged:
    @pytest.mark.asyncio
    async def test_google_key_absent_from_url_and_logs(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        secret = "AIza-secret-1234"
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            body = {"candidates": [{"content": {"parts": [{"text": "ok"}]}}]}
            return httpx.Response(200, json=body)

        async with GoogleProvider(api_key=secret) as provider:
            assert provider._client is not None
            await provider._client.aclose()
            provider._client = httpx.AsyncClient(
                transport=httpx.MockTransport(handler),
                headers=provider._headers(),
            )
            with caplog.at_level(logging.DEBUG), caplog.at_level(logging.DEBUG, logger="httpx"):
                await provider.call("gemini-pro", "Hi")

        assert seen[0].headers["x-goog-api-key"] == secret
        assert secret not in str(seen[0].url)
        assert all(secret not in record.getMessage() for record in caplog.records)

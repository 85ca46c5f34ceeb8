"""
Tests for adalloc.llm_client module.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from adalloc.config import AIConfig
from adalloc.exceptions import (
    RecommendationAPIError,
    RecommendationConnectionError,
    RecommendationDataError,
    RecommendationUnavailableError,
)
from adalloc.llm_client import (
    NOT_CONFIGURED_MESSAGE,
    AnthropicRecommendationClient,
    DisabledRecommendationClient,
    build_recommendation_client,
)

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _reply(*texts: str):
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=t) for t in texts],
        stop_reason="end_turn",
        usage=SimpleNamespace(input_tokens=120, output_tokens=80),
    )


def _client_with(create: AsyncMock) -> AnthropicRecommendationClient:
    client = AnthropicRecommendationClient(api_key="sk-test", model="test-model", max_tokens=500)
    client._client = MagicMock()
    client._client.messages.create = create
    return client


class TestBuildRecommendationClient:
    """Client selection from configuration."""

    def test_without_key(self):
        client = build_recommendation_client(AIConfig(api_key=""))
        assert isinstance(client, DisabledRecommendationClient)
        assert not client.is_available

    def test_with_key(self):
        client = build_recommendation_client(AIConfig(api_key="sk-test", timeout_seconds=5))
        assert isinstance(client, AnthropicRecommendationClient)
        assert client.is_available
        assert client.timeout == 5


class TestDisabledClient:
    @pytest.mark.asyncio
    async def test_raises_unavailable(self):
        with pytest.raises(RecommendationUnavailableError) as exc_info:
            await DisabledRecommendationClient().complete("system", "prompt")
        assert exc_info.value.message == NOT_CONFIGURED_MESSAGE


class TestAnthropicClient:
    """Anthropic SDK calls and error mapping."""

    @pytest.mark.asyncio
    async def test_returns_text(self):
        create = AsyncMock(return_value=_reply('{"a": ', '1}'))
        client = _client_with(create)

        text = await client.complete("be brief", "hello")

        assert text == '{"a": 1}'
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 500
        assert kwargs["system"] == "be brief"
        assert kwargs["messages"] == [{"role": "user", "content": "hello"}]

    @pytest.mark.asyncio
    async def test_empty_reply(self):
        client = _client_with(AsyncMock(return_value=_reply("  ")))
        with pytest.raises(RecommendationDataError):
            await client.complete("s", "p")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        error = anthropic.APIConnectionError(request=REQUEST)
        client = _client_with(AsyncMock(side_effect=error))
        with pytest.raises(RecommendationConnectionError):
            await client.complete("s", "p")

    @pytest.mark.asyncio
    async def test_status_error(self):
        error = anthropic.APIStatusError(
            "Overloaded", response=httpx.Response(529, request=REQUEST), body=None
        )
        client = _client_with(AsyncMock(side_effect=error))
        with pytest.raises(RecommendationAPIError) as exc_info:
            await client.complete("s", "p")
        assert exc_info.value.status_code == 529

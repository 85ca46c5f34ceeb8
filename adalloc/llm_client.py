"""
Recommendation service clients.

The optimizer talks to a RecommendationClient port. Two implementations:

- AnthropicRecommendationClient: Claude via the anthropic SDK
- DisabledRecommendationClient: used when no API key is configured

get_recommendation_client() picks one at construction time, so callers never
check configuration themselves.
"""
from abc import ABC, abstractmethod
from typing import Optional

import anthropic
from anthropic import AsyncAnthropic

from adalloc.config import AIConfig, config
from adalloc.exceptions import (
    RecommendationAPIError,
    RecommendationConnectionError,
    RecommendationDataError,
    RecommendationUnavailableError,
)
from adalloc.observability import get_logger

logger = get_logger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "AI Strategist is not configured. To use AI features, "
    "please set the ANTHROPIC_API_KEY environment variable."
)


class RecommendationClient(ABC):
    """Port for the hosted model that proposes budget allocations."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether requests can be sent at all."""

    @abstractmethod
    async def complete(self, system: str, prompt: str) -> str:
        """
        Send one prompt and return the raw reply text.

        Raises:
            RecommendationError subclasses on any failure
        """


class DisabledRecommendationClient(RecommendationClient):
    """Stand-in used when the AI strategist is not configured."""

    def __init__(self, reason: str = NOT_CONFIGURED_MESSAGE):
        self.reason = reason

    @property
    def is_available(self) -> bool:
        return False

    async def complete(self, system: str, prompt: str) -> str:
        raise RecommendationUnavailableError(self.reason)


class AnthropicRecommendationClient(RecommendationClient):
    """Async client for Claude."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 2000,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client: Optional[AsyncAnthropic] = None

    @property
    def client(self) -> AsyncAnthropic:
        """Lazy-initialize Anthropic client."""
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)
        return self._client

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    async def complete(self, system: str, prompt: str) -> str:
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIConnectionError as e:
            # Includes APITimeoutError
            raise RecommendationConnectionError("Could not reach Anthropic API", str(e)) from e
        except anthropic.APIStatusError as e:
            raise RecommendationAPIError(
                "Anthropic API returned an error",
                details=str(e.message),
                status_code=e.status_code,
            ) from e
        except anthropic.APIError as e:
            raise RecommendationAPIError("Anthropic API error", str(e)) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        logger.debug(
            "Recommendation reply received",
            extra={
                "model": self.model,
                "stop_reason": response.stop_reason,
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )
        if not text.strip():
            raise RecommendationDataError("No response text from model", expected="text", got="empty")
        return text


def build_recommendation_client(ai_config: AIConfig) -> RecommendationClient:
    """Select the client implementation for the given configuration."""
    if not ai_config.is_configured:
        logger.warning("ANTHROPIC_API_KEY not set; AI strategist disabled")
        return DisabledRecommendationClient()
    return AnthropicRecommendationClient(
        api_key=ai_config.api_key,
        model=ai_config.model,
        max_tokens=ai_config.max_tokens,
        timeout=ai_config.timeout_seconds,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# SINGLETON INSTANCE
# ═══════════════════════════════════════════════════════════════════════════════

_recommendation_client: Optional[RecommendationClient] = None


def get_recommendation_client() -> RecommendationClient:
    """Get singleton recommendation client instance."""
    global _recommendation_client
    if _recommendation_client is None:
        _recommendation_client = build_recommendation_client(config.ai)
    return _recommendation_client

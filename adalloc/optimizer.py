"""
Budget optimization requests to the AI strategist.

Builds the request from a campaign's channels and budget, sends it through a
RecommendationClient, and validates the reply. Every failure (disabled client,
transport error, timeout, unparseable or incomplete reply) is turned into an
empty recommendation list with an explanatory global strategy; nothing here
raises to callers.
"""
import asyncio
import json
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from adalloc.exceptions import (
    RecommendationDataError,
    RecommendationError,
    RecommendationUnavailableError,
)
from adalloc.llm_client import RecommendationClient, get_recommendation_client
from adalloc.models import Channel
from adalloc.observability import Timer, get_logger
from adalloc.schemas import ChannelSnapshot, OptimizationRequest, RecommendationResponse

logger = get_logger(__name__)

FAILED_MESSAGE = "Failed to generate recommendations. Please check API Key or try again."
TIMEOUT_MESSAGE = "The AI strategist did not respond in time. Please try again."
UNREADABLE_MESSAGE = "The AI strategist returned an unreadable answer. Please try again."
NO_CHANNELS_MESSAGE = "This campaign has no channels to optimize yet. Add a channel first."

SYSTEM_PROMPT = """You are a world-class performance marketing strategist.
Your goal is to analyze channel performance data (Spend, ROAS, CPC, Revenue) and suggest an optimal budget allocation to maximize total Revenue.

Rules:
1. Identify high ROAS channels and suggest increasing spend there.
2. Identify low ROAS channels with high CPC and suggest cutting spend, unless they are vital for awareness.
3. The suggested spend across all channels MUST sum to the provided totalBudget exactly.
4. Provide a brief, punchy reasoning for every channel.
5. Provide a global strategy summary.

Reply with a single JSON object and nothing else, in this shape:
{
  "recommendations": [
    {"channelId": "<id from the input>", "suggestedSpend": <number >= 0>, "reasoning": "<text>"}
  ],
  "globalStrategy": "<text>"
}"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def build_request(channels: Iterable[Channel], total_budget: float) -> OptimizationRequest:
    """Reduce channels to the fields the strategist sees."""
    return OptimizationRequest(
        total_budget=total_budget,
        channels=[
            ChannelSnapshot(
                id=c.id,
                name=c.name,
                spend=c.spend,
                roas=c.roas,
                revenue=c.revenue,
                cpc=c.cpc,
            )
            for c in channels
        ],
    )


def render_prompt(request: OptimizationRequest) -> str:
    channels_json = json.dumps([c.to_wire() for c in request.channels], indent=2)
    return (
        f"Total Budget Available (totalBudget): {request.total_budget:g}\n\n"
        f"Current Performance Data:\n{channels_json}\n\n"
        "Please provide an optimized budget allocation. "
        f"Suggested spends must add up to exactly {request.total_budget:g}."
    )


def parse_recommendation(text: str) -> RecommendationResponse:
    """
    Parse and validate a strategist reply.

    Accepts the JSON object bare or wrapped in a Markdown code fence.

    Raises:
        RecommendationDataError: If the text is not JSON or misses required fields
    """
    if not text or not text.strip():
        raise RecommendationDataError("Empty reply", expected="JSON object", got="empty")

    body = text.strip()
    fenced = _FENCE_RE.match(body)
    if fenced:
        body = fenced.group(1)

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise RecommendationDataError("Reply is not valid JSON", str(e)) from e

    if not isinstance(payload, dict):
        raise RecommendationDataError(
            "Unexpected reply structure", expected="object", got=type(payload).__name__
        )

    try:
        return RecommendationResponse.model_validate(payload)
    except PydanticValidationError as e:
        raise RecommendationDataError(
            "Reply is missing required fields", f"{e.error_count()} validation errors"
        ) from e


def _explain(error: Exception) -> str:
    if isinstance(error, RecommendationUnavailableError):
        return error.message
    if isinstance(error, asyncio.TimeoutError):
        return TIMEOUT_MESSAGE
    if isinstance(error, RecommendationDataError):
        return UNREADABLE_MESSAGE
    return FAILED_MESSAGE


async def get_budget_optimization(
    channels: Iterable[Channel],
    total_budget: float,
    client: Optional[RecommendationClient] = None,
    timeout: Optional[float] = None,
) -> RecommendationResponse:
    """
    Ask the strategist for a reallocation of total_budget across channels.

    Args:
        channels: Channels in scope (normally one campaign's channels)
        total_budget: Budget the suggested spends should sum to
        client: Recommendation client (defaults to the configured singleton)
        timeout: Optional overall deadline in seconds

    Returns:
        Validated reply, or an empty reply whose global strategy explains
        why no recommendations are available
    """
    client = client or get_recommendation_client()

    try:
        request = build_request(channels, total_budget)
        if not request.channels:
            return RecommendationResponse.failure(NO_CHANNELS_MESSAGE)

        with Timer("recommendation_request", logger):
            call = client.complete(SYSTEM_PROMPT, render_prompt(request))
            text = await (asyncio.wait_for(call, timeout) if timeout else call)
        response = parse_recommendation(text)
    except RecommendationUnavailableError as e:
        logger.info(f"Optimization skipped: {e}")
        return RecommendationResponse.failure(_explain(e))
    except (RecommendationError, asyncio.TimeoutError) as e:
        logger.error(f"Error fetching optimization: {e!r}")
        return RecommendationResponse.failure(_explain(e))
    except Exception as e:
        logger.exception(f"Unexpected error fetching optimization: {e}")
        return RecommendationResponse.failure(FAILED_MESSAGE)

    gap = response.budget_gap(request.total_budget)
    if abs(gap) > 0.01:
        logger.warning(
            "Suggested spends do not match the budget",
            extra={"total_budget": request.total_budget, "budget_gap": round(gap, 2)},
        )
    return response


@dataclass(frozen=True)
class OptimizationOutcome:
    """A resolved optimization request."""
    request_id: int
    customer_id: str
    campaign_id: str
    total_budget: float
    response: RecommendationResponse
    stale: bool = False

    @property
    def budget_gap(self) -> float:
        return self.response.budget_gap(self.total_budget)


class BudgetOptimizer:
    """
    Sequences optimization requests.

    Each request gets an increasing id. When requests overlap, a resolution
    that is older than the newest one already recorded is returned to its
    caller marked stale and does not replace ``latest``.
    """

    def __init__(self, client: Optional[RecommendationClient] = None,
                 timeout: Optional[float] = None):
        self.client = client or get_recommendation_client()
        self.timeout = timeout
        self.latest: Optional[OptimizationOutcome] = None
        self._sequence = 0
        self._in_flight = 0

    @property
    def is_available(self) -> bool:
        return self.client.is_available

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    async def optimize(
        self,
        customer_id: str,
        campaign_id: str,
        channels: Iterable[Channel],
        total_budget: float,
    ) -> OptimizationOutcome:
        self._sequence += 1
        request_id = self._sequence
        self._in_flight += 1
        try:
            response = await get_budget_optimization(
                channels, total_budget, client=self.client, timeout=self.timeout
            )
        finally:
            self._in_flight -= 1

        stale = self.latest is not None and self.latest.request_id > request_id
        outcome = OptimizationOutcome(
            request_id=request_id,
            customer_id=customer_id,
            campaign_id=campaign_id,
            total_budget=total_budget,
            response=response,
            stale=stale,
        )
        if stale:
            logger.info(
                "Discarding stale optimization result",
                extra={"request_id": request_id, "latest_request_id": self.latest.request_id},
            )
        else:
            self.latest = outcome
        return outcome

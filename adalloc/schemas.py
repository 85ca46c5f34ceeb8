"""
Pydantic models for the recommendation service contract.

Request:  {totalBudget, channels: [{id, name, spend, roas, revenue, cpc}, ...]}
Response: {recommendations: [{channelId, suggestedSpend, reasoning}, ...], globalStrategy}

Field names are snake_case in Python and camelCase on the wire.
"""
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WireModel(BaseModel):
    """Base model accepting both camelCase aliases and field names; numbers must be finite."""
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    def to_wire(self) -> Dict:
        return self.model_dump(by_alias=True)


# ═══════════════════════════════════════════════════════════════════════════════
# REQUEST
# ═══════════════════════════════════════════════════════════════════════════════

class ChannelSnapshot(WireModel):
    """Channel state sent to the recommendation service."""
    id: str
    name: str
    spend: float
    roas: float
    revenue: float
    cpc: float


class OptimizationRequest(WireModel):
    """Everything the strategist needs to propose an allocation."""
    total_budget: float = Field(alias="totalBudget", ge=0)
    channels: List[ChannelSnapshot]


# ═══════════════════════════════════════════════════════════════════════════════
# RESPONSE
# ═══════════════════════════════════════════════════════════════════════════════

class ChannelRecommendation(WireModel):
    """Suggested spend for one channel."""
    channel_id: str = Field(alias="channelId", min_length=1)
    suggested_spend: float = Field(alias="suggestedSpend", ge=0)
    reasoning: str = Field(min_length=1)

    @field_validator("reasoning")
    @classmethod
    def reasoning_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("reasoning must not be blank")
        return value.strip()


class RecommendationResponse(WireModel):
    """
    Strategist reply.

    An empty recommendations list with an explanatory global_strategy is the
    failure sentinel returned when the service could not be used.
    """
    recommendations: List[ChannelRecommendation]
    global_strategy: str = Field(alias="globalStrategy", min_length=1)

    @classmethod
    def failure(cls, explanation: str) -> "RecommendationResponse":
        return cls(recommendations=[], global_strategy=explanation)

    @property
    def is_empty(self) -> bool:
        return not self.recommendations

    @property
    def suggested_total(self) -> float:
        return sum(r.suggested_spend for r in self.recommendations)

    def budget_gap(self, total_budget: float) -> float:
        """Suggested total minus budget; 0 means the reply honours the budget."""
        return self.suggested_total - total_budget

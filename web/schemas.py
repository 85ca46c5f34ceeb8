"""
Pydantic request/response models for API endpoints.

Bodies accept the camelCase keys used by the dashboard front end as well as
snake_case field names. Range checks (negative amounts, unknown statuses) are
left to adalloc.validators so the API and the library reject the same inputs
with the same messages.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from adalloc.schemas import ChannelRecommendation


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ═══════════════════════════════════════════════════════════════════════════════
# CUSTOMERS / CAMPAIGNS / CHANNELS
# ═══════════════════════════════════════════════════════════════════════════════

class CustomerCreate(RequestModel):
    """New customer."""
    name: str
    total_budget: float = Field(0.0, alias="totalBudget")
    industry: Optional[str] = None
    contact_person: Optional[str] = Field(None, alias="contactPerson")
    email: Optional[str] = None
    status: str = "active"
    color: str = "#6366F1"


class CampaignCreate(RequestModel):
    """New campaign; budget defaults to the configured default campaign budget."""
    name: str
    budget: Optional[float] = None
    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")
    status: str = "active"
    description: Optional[str] = None


class ChannelCreate(RequestModel):
    """New channel; supply revenue or roas and name which one is authoritative."""
    name: str
    id: Optional[str] = None
    spend: Optional[float] = None
    impressions: int = 0
    clicks: int = 0
    revenue: Optional[float] = None
    roas: Optional[float] = None
    source: Optional[str] = Field(None, description="'roas' or 'revenue'")
    allocation: float = 0.0
    color: str = "#6366F1"


class SpendUpdate(RequestModel):
    """Manual spend edit."""
    spend: float


class AllocationApply(RequestModel):
    """Channel id → new spend."""
    allocations: Dict[str, float]


# ═══════════════════════════════════════════════════════════════════════════════
# OPTIMIZATION
# ═══════════════════════════════════════════════════════════════════════════════

class OptimizationResponse(BaseModel):
    """Strategist outcome for one campaign."""
    model_config = ConfigDict(populate_by_name=True)

    request_id: int = Field(alias="requestId")
    customer_id: str = Field(alias="customerId")
    campaign_id: str = Field(alias="campaignId")
    total_budget: float = Field(alias="totalBudget")
    recommendations: List[ChannelRecommendation]
    global_strategy: str = Field(alias="globalStrategy")
    budget_gap: float = Field(alias="budgetGap")
    stale: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# GOALS / SETTINGS
# ═══════════════════════════════════════════════════════════════════════════════

class GoalCreate(RequestModel):
    """New goal; its current value is derived, not supplied."""
    name: str
    target_value: float = Field(alias="targetValue")
    type: str = "revenue"
    deadline: Optional[str] = None


class GoalUpdate(RequestModel):
    name: Optional[str] = None
    target_value: Optional[float] = Field(None, alias="targetValue")
    deadline: Optional[str] = None


class SettingsUpdate(RequestModel):
    currency: Optional[str] = None
    default_campaign_budget: Optional[float] = Field(None, alias="defaultCampaignBudget")
    default_channel_budget: Optional[float] = Field(None, alias="defaultChannelBudget")
    show_welcome: Optional[bool] = Field(None, alias="showWelcome")

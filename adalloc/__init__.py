"""
AdAlloc shared library.

This package contains the budget-allocation logic used by the web service:
- models: Customer → Campaign → Channel tree, goals, settings
- metrics: ROAS/CPC/CTR derivation and aggregate totals
- allocation: merging spend reallocations into a campaign
- optimizer: AI strategist requests and reply validation
- state: owned state container with persistence on commit
- config: Centralized configuration
"""

# Import in dependency order
from adalloc.exceptions import (
    AdAllocError,
    RecommendationError,
    RecommendationConnectionError,
    RecommendationAPIError,
    RecommendationDataError,
    RecommendationUnavailableError,
    EntityNotFoundError,
    ValidationError,
)

from adalloc.models import (
    Channel,
    Campaign,
    Customer,
    Goal,
    AppSettings,
    CampaignStatus,
    CustomerStatus,
    GoalStatus,
    GoalType,
    Currency,
    RevenueSource,
)

from adalloc.metrics import (
    derive_channel_metrics,
    aggregate,
    campaign_totals,
    customer_totals,
    global_totals,
    Totals,
)

from adalloc.allocation import merge_allocation, MergeResult

from adalloc.optimizer import get_budget_optimization, BudgetOptimizer

from adalloc.state import DashboardState, load_state

from adalloc.config import config

__all__ = [
    # Exceptions
    "AdAllocError",
    "RecommendationError",
    "RecommendationConnectionError",
    "RecommendationAPIError",
    "RecommendationDataError",
    "RecommendationUnavailableError",
    "EntityNotFoundError",
    "ValidationError",
    # Models
    "Channel",
    "Campaign",
    "Customer",
    "Goal",
    "AppSettings",
    "CampaignStatus",
    "CustomerStatus",
    "GoalStatus",
    "GoalType",
    "Currency",
    "RevenueSource",
    # Metrics
    "derive_channel_metrics",
    "aggregate",
    "campaign_totals",
    "customer_totals",
    "global_totals",
    "Totals",
    # Allocation / optimization
    "merge_allocation",
    "MergeResult",
    "get_budget_optimization",
    "BudgetOptimizer",
    # State
    "DashboardState",
    "load_state",
    # Config
    "config",
]

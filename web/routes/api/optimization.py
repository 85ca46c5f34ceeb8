"""AI budget optimization and allocation apply endpoints."""
from fastapi import APIRouter, Request

from web.schemas import AllocationApply, OptimizationResponse
from ._deps import limiter, get_state, get_optimizer, get_logger, OPTIMIZE_LIMIT, WRITE_LIMIT

router = APIRouter()
logger = get_logger(__name__)


@router.post("/customers/{customer_id}/campaigns/{campaign_id}/optimize")
@limiter.limit(OPTIMIZE_LIMIT)
async def optimize_campaign(request: Request, customer_id: str, campaign_id: str):
    """
    Ask the strategist to reallocate the campaign budget across its channels.

    Always answers 200; on failure the recommendation list is empty and the
    strategy text explains what went wrong.
    """
    state = get_state(request)
    optimizer = get_optimizer(request)
    campaign = state.get_campaign(customer_id, campaign_id)
    outcome = await optimizer.optimize(
        customer_id, campaign_id, list(campaign.channels), campaign.budget
    )
    return OptimizationResponse(
        request_id=outcome.request_id,
        customer_id=outcome.customer_id,
        campaign_id=outcome.campaign_id,
        total_budget=outcome.total_budget,
        recommendations=outcome.response.recommendations,
        global_strategy=outcome.response.global_strategy,
        budget_gap=outcome.budget_gap,
        stale=outcome.stale,
    ).model_dump(by_alias=True)


@router.post("/customers/{customer_id}/campaigns/{campaign_id}/apply")
@limiter.limit(WRITE_LIMIT)
async def apply_allocation(request: Request, customer_id: str, campaign_id: str, body: AllocationApply):
    """Merge channel id → spend into the campaign. Unknown ids are reported, not applied."""
    state = get_state(request)
    result = state.apply_optimization(customer_id, campaign_id, body.allocations)
    campaign = state.get_campaign(customer_id, campaign_id)
    return {
        "updated": result.updated_ids,
        "ignored": result.ignored_ids,
        "campaign": campaign.to_dict(),
        "totals": state.campaign_totals(customer_id, campaign_id).to_dict(),
    }

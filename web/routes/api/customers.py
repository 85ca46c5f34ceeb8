"""Customer, campaign and channel endpoints."""
from typing import Optional

from fastapi import APIRouter, Query, Request

from adalloc.metrics import search_customers, spend_distribution
from web.schemas import CampaignCreate, ChannelCreate, CustomerCreate, SpendUpdate
from ._deps import limiter, get_state, get_logger, READ_LIMIT, WRITE_LIMIT

router = APIRouter()
logger = get_logger(__name__)


def _customer_payload(state, customer) -> dict:
    return {
        **customer.to_dict(),
        "totals": state.customer_totals(customer.id).to_dict(),
    }


@router.get("/customers")
@limiter.limit(READ_LIMIT)
async def list_customers(
    request: Request,
    q: Optional[str] = Query(None, description="Match on name or industry"),
):
    """List customers, each with its aggregated totals."""
    state = get_state(request)
    customers = search_customers(state.customers, q or "")
    return {
        "customers": [_customer_payload(state, c) for c in customers],
        "count": len(customers),
    }


@router.post("/customers", status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_customer(request: Request, body: CustomerCreate):
    state = get_state(request)
    customer = state.add_customer(
        name=body.name,
        total_budget=body.total_budget,
        industry=body.industry,
        contact_person=body.contact_person,
        email=body.email,
        status=body.status,
        color=body.color,
    )
    return _customer_payload(state, customer)


@router.get("/customers/{customer_id}")
@limiter.limit(READ_LIMIT)
async def get_customer(request: Request, customer_id: str):
    state = get_state(request)
    customer = state.get_customer(customer_id)
    payload = _customer_payload(state, customer)
    payload["campaignTotals"] = {
        campaign.id: state.campaign_totals(customer_id, campaign.id).to_dict()
        for campaign in customer.campaigns
    }
    return payload


@router.post("/customers/{customer_id}/campaigns", status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_campaign(request: Request, customer_id: str, body: CampaignCreate):
    state = get_state(request)
    campaign = state.add_campaign(
        customer_id,
        name=body.name,
        budget=body.budget,
        start_date=body.start_date,
        end_date=body.end_date,
        status=body.status,
        description=body.description,
    )
    return campaign.to_dict()


@router.get("/customers/{customer_id}/campaigns/{campaign_id}")
@limiter.limit(READ_LIMIT)
async def get_campaign(request: Request, customer_id: str, campaign_id: str):
    """Campaign detail with totals and each channel's share of spend."""
    state = get_state(request)
    campaign = state.get_campaign(customer_id, campaign_id)
    return {
        **campaign.to_dict(),
        "totals": state.campaign_totals(customer_id, campaign_id).to_dict(),
        "spendShare": spend_distribution(campaign.channels),
    }


@router.post("/customers/{customer_id}/campaigns/{campaign_id}/channels", status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_channel(request: Request, customer_id: str, campaign_id: str, body: ChannelCreate):
    state = get_state(request)
    channel = state.add_channel(
        customer_id,
        campaign_id,
        name=body.name,
        spend=body.spend,
        impressions=body.impressions,
        clicks=body.clicks,
        revenue=body.revenue,
        roas=body.roas,
        source=body.source,
        allocation=body.allocation,
        color=body.color,
        channel_id=body.id,
    )
    return channel.to_dict()


@router.patch("/customers/{customer_id}/campaigns/{campaign_id}/channels/{channel_id}")
@limiter.limit(WRITE_LIMIT)
async def update_channel_spend(
    request: Request, customer_id: str, campaign_id: str, channel_id: str, body: SpendUpdate
):
    """Set a channel's spend; revenue follows at the channel's ROAS."""
    state = get_state(request)
    channel = state.update_channel_spend(customer_id, campaign_id, channel_id, body.spend)
    return channel.to_dict()

"""Application settings endpoints."""
from fastapi import APIRouter, Request

from adalloc.seed import CURRENCIES
from web.schemas import SettingsUpdate
from ._deps import limiter, get_state, READ_LIMIT, WRITE_LIMIT

router = APIRouter()


@router.get("/settings")
@limiter.limit(READ_LIMIT)
async def get_settings(request: Request):
    state = get_state(request)
    return {**state.settings.to_dict(), "currencies": CURRENCIES}


@router.put("/settings")
@limiter.limit(WRITE_LIMIT)
async def update_settings(request: Request, body: SettingsUpdate):
    state = get_state(request)
    settings = state.update_settings(
        currency=body.currency,
        default_campaign_budget=body.default_campaign_budget,
        default_channel_budget=body.default_channel_budget,
        show_welcome=body.show_welcome,
    )
    return settings.to_dict()

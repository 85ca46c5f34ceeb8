"""Health check and dashboard overview endpoints."""
import time

from fastapi import APIRouter, Request

from adalloc.config import VERSION
from adalloc.formatting import format_currency, format_percent, format_roas
from ._deps import limiter, get_state, get_optimizer, get_logger, READ_LIMIT, START_TIME

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health")
@limiter.limit(READ_LIMIT)
async def health_check(request: Request):
    """Liveness plus whether the AI strategist can be reached."""
    state = get_state(request)
    optimizer = get_optimizer(request)
    return {
        "status": "healthy",
        "version": VERSION,
        "uptime_seconds": int(time.time() - START_TIME),
        "customers": len(state.customers),
        "goals": len(state.goals),
        "ai_available": optimizer.is_available,
        "optimizing": optimizer.is_loading,
    }


@router.get("/overview")
@limiter.limit(READ_LIMIT)
async def get_overview(request: Request):
    """Global totals across every customer, with display strings in the chosen currency."""
    state = get_state(request)
    overview = state.overview()
    totals = overview.totals
    currency = state.settings.currency
    return {
        **overview.to_dict(),
        "currency": currency.value,
        "formatted": {
            "totalSpend": format_currency(totals.total_spend, currency),
            "totalRevenue": format_currency(totals.total_revenue, currency),
            "blendedRoas": format_roas(totals.blended_roas),
            "blendedCtr": format_percent(totals.blended_ctr),
        },
    }

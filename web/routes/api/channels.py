"""Flattened channel listing across every customer and campaign."""
from typing import Optional

from fastapi import APIRouter, Query, Request

from adalloc.metrics import filter_channel_rows, flatten_channels, rows_totals, sort_channel_rows
from ._deps import limiter, get_state, READ_LIMIT

router = APIRouter()


@router.get("/channels")
@limiter.limit(READ_LIMIT)
async def list_channels(
    request: Request,
    q: Optional[str] = Query(None, description="Match on channel, customer or campaign name"),
    sort: str = Query("spend", description="spend, revenue or roas (descending)"),
):
    state = get_state(request)
    rows = filter_channel_rows(flatten_channels(state.customers), q or "")
    rows = sort_channel_rows(rows, sort)
    return {
        "channels": [row.to_dict() for row in rows],
        "totals": rows_totals(rows).to_dict(),
        "count": len(rows),
    }

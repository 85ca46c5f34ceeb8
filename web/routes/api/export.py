"""Data export endpoint."""
from fastapi import APIRouter, Request
from fastapi.responses import Response

from adalloc.export import export_customers, export_filename
from ._deps import limiter, get_state, get_logger, READ_LIMIT

router = APIRouter()
logger = get_logger(__name__)


@router.get("/export")
@limiter.limit(READ_LIMIT)
async def export_data(request: Request):
    """Download every customer with nested campaigns and channels as JSON."""
    state = get_state(request)
    filename = export_filename(state.today())
    logger.info("Exporting customers", extra={"customers": len(state.customers)})
    return Response(
        content=export_customers(state.customers),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

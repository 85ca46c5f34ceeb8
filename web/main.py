"""
FastAPI web application for the AdAlloc budget dashboard.
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from adalloc.config import config, validate_config, ConfigurationError, VERSION
from adalloc.exceptions import EntityNotFoundError, ValidationError
from adalloc.observability import setup_logging, get_logger
from adalloc.optimizer import BudgetOptimizer
from adalloc.persistence import JsonFileStore
from adalloc.state import DashboardState, load_state
from web.middleware import RequestLoggingMiddleware
from web.routes import api
from web.routes.api._deps import limiter

# Configure structured logging
# Use JSON format in production (LOG_FORMAT=json), human-readable otherwise
setup_logging(level=config.logging.level, json_format=config.logging.json_format)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("AdAlloc dashboard starting...")

    # Validate configuration early - fail fast with clear errors
    try:
        validate_config()
        logger.info("Configuration validated")
    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}")
        raise SystemExit(1)

    if getattr(app.state, "dashboard", None) is None:
        store = JsonFileStore(config.storage.data_dir)
        app.state.dashboard = load_state(store, config.storage)
    if getattr(app.state, "optimizer", None) is None:
        app.state.optimizer = BudgetOptimizer(timeout=config.ai.timeout_seconds)

    logger.info(
        "Dashboard ready",
        extra={"ai_available": app.state.optimizer.is_available},
    )
    yield
    logger.info("AdAlloc dashboard stopped")


def create_app(
    state: Optional[DashboardState] = None,
    optimizer: Optional[BudgetOptimizer] = None,
) -> FastAPI:
    """
    Build the application.

    State and optimizer are loaded on startup unless supplied here.
    """
    app = FastAPI(
        title="AdAlloc Dashboard",
        description="Marketing budget allocation across customers, campaigns and channels",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.dashboard = state
    app.state.optimizer = optimizer

    # Add rate limiter to app state
    app.state.limiter = limiter

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(f"Rate limit exceeded for {get_remote_address(request)}")
        return JSONResponse(
            status_code=429,
            content={
                "error": "Rate limit exceeded",
                "detail": "Too many requests. Please try again later.",
                "retry_after": exc.detail
            }
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "field": exc.field, "detail": str(exc)},
        )

    @app.exception_handler(EntityNotFoundError)
    async def not_found_handler(request: Request, exc: EntityNotFoundError):
        return JSONResponse(
            status_code=404,
            content={"error": exc.message, "detail": exc.details},
        )

    # Add request logging middleware (adds correlation IDs and timing)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(api.router, prefix="/api")
    return app


app = create_app()


def run() -> None:
    """Serve the app on the configured WEB_HOST/WEB_PORT."""
    import uvicorn

    uvicorn.run("web.main:app", host=config.web.host, port=config.web.port, log_config=None)


if __name__ == "__main__":
    run()

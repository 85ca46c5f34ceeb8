"""Shared dependencies for API route modules."""
import time

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from adalloc.config import config
from adalloc.observability import get_logger
from adalloc.optimizer import BudgetOptimizer
from adalloc.state import DashboardState

# Shared limiter instance
limiter = Limiter(key_func=get_remote_address)

READ_LIMIT = config.web.read_rate_limit
WRITE_LIMIT = config.web.write_rate_limit
OPTIMIZE_LIMIT = config.web.optimize_rate_limit

# Track startup time for uptime calculation
START_TIME = time.time()


def get_state(request: Request) -> DashboardState:
    return request.app.state.dashboard


def get_optimizer(request: Request) -> BudgetOptimizer:
    return request.app.state.optimizer


__all__ = [
    "limiter",
    "get_logger",
    "get_state",
    "get_optimizer",
    "READ_LIMIT",
    "WRITE_LIMIT",
    "OPTIMIZE_LIMIT",
    "START_TIME",
]

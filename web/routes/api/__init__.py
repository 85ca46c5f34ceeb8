"""
API routes split by domain.

Each sub-module defines its own APIRouter which is composed
into the top-level router exposed by this package.
"""
from fastapi import APIRouter

from .health import router as health_router
from .customers import router as customers_router
from .channels import router as channels_router
from .optimization import router as optimization_router
from .goals import router as goals_router
from .settings import router as settings_router
from .export import router as export_router

router = APIRouter(tags=["api"])

router.include_router(health_router)
router.include_router(customers_router)
router.include_router(channels_router)
router.include_router(optimization_router)
router.include_router(goals_router)
router.include_router(settings_router)
router.include_router(export_router)

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.config import settings
from app.services.trending.engine import TrendingEngine, get_trending_engine

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/ready")
async def readiness_check(engine: TrendingEngine = Depends(get_trending_engine)):
    """Readiness check endpoint confirming the engine can be constructed."""
    return {
        "status": "ready",
        "version": settings.app_version,
        "environment": settings.environment,
        "default_limit": engine.default_limit,
    }

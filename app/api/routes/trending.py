"""API endpoints for trending-factor analysis."""
# ruff: noqa: UP017

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from app.models.trending import TrendingSnapshot
from app.services.trending.engine import TrendingEngine, get_trending_engine
from app.services.trending.errors import TrendingError

router = APIRouter()
logger = logging.getLogger(__name__)


class TrendingAction(str, Enum):
    CALCULATE = "calculate"
    TOP = "top"
    CATEGORY = "category"
    SECTORS = "sectors"
    COMPANY = "company"
    STATS = "stats"


class RecalculateRequest(BaseModel):
    action: str


@router.get("/trending-factors")
async def get_trending_factors(
    action: str = Query(TrendingAction.TOP.value, description="View to compute."),
    limit: int | None = Query(None, ge=0, description="Maximum companies returned."),
    category: str = Query("", description="Category substring for action=category."),
    company_id: str = Query("", alias="id", description="Company id for action=company."),
    engine: TrendingEngine = Depends(get_trending_engine),
) -> dict[str, Any]:
    """Serve trending views over the tracked population."""
    try:
        resolved = TrendingAction(action)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid action") from exc

    try:
        data = _dispatch(engine, resolved, limit=limit, category=category, company_id=company_id)
    except TrendingError as exc:
        logger.error("trending.api_error", extra={"action": resolved.value, "code": exc.code})
        raise HTTPException(status_code=map_error_code(exc.code), detail=str(exc)) from exc
    return {"success": True, "data": data}


@router.post("/trending-factors")
async def recalculate_trending_factors(
    payload: RecalculateRequest,
    engine: TrendingEngine = Depends(get_trending_engine),
) -> dict[str, Any]:
    """Recompute the snapshot and record it as history for the next run."""
    if payload.action != "recalculate":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid action")
    try:
        snapshot = engine.compute_snapshot(record_history=True)
    except TrendingError as exc:
        logger.error("trending.api_error", extra={"action": payload.action, "code": exc.code})
        raise HTTPException(status_code=map_error_code(exc.code), detail=str(exc)) from exc
    return {"success": True, "data": _snapshot_payload(snapshot)}


def _dispatch(
    engine: TrendingEngine,
    action: TrendingAction,
    *,
    limit: int | None,
    category: str,
    company_id: str,
) -> dict[str, Any]:
    if action is TrendingAction.CALCULATE:
        return _snapshot_payload(engine.compute_snapshot())
    if action is TrendingAction.TOP:
        top = engine.top(limit)
        return {
            "top_trending": [item.model_dump(mode="json") for item in top],
            "count": len(top),
            "timestamp": _timestamp(),
        }
    if action is TrendingAction.CATEGORY:
        matches = engine.by_category(category, limit)
        return {
            "category": category,
            "trending": [item.model_dump(mode="json") for item in matches],
            "count": len(matches),
            "timestamp": _timestamp(),
        }
    if action is TrendingAction.SECTORS:
        sectors = engine.sectors()
        return {
            "sectors": [sector.model_dump(mode="json") for sector in sectors],
            "total_sectors": len(sectors),
            "timestamp": _timestamp(),
        }
    if action is TrendingAction.COMPANY:
        return {
            "trending": engine.company(company_id).model_dump(mode="json"),
            "timestamp": _timestamp(),
        }
    stats = engine.stats()
    return {
        "statistics": stats.model_dump(mode="json", exclude={"distribution"}),
        "distribution": stats.distribution.model_dump(mode="json"),
        "timestamp": _timestamp(),
    }


def _snapshot_payload(snapshot: TrendingSnapshot) -> dict[str, Any]:
    return {
        "trending": [item.model_dump(mode="json") for item in snapshot.trending],
        "total_companies": snapshot.total_companies,
        "timestamp": _timestamp(snapshot.generated_at),
    }


def _timestamp(value: datetime | None = None) -> str:
    value = (value or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


def map_error_code(code: str) -> int:
    if code.startswith("400_"):
        return status.HTTP_400_BAD_REQUEST
    if code.startswith("404_"):
        return status.HTTP_404_NOT_FOUND
    if code == "422_INVALID_COMPANY_DATA":
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_500_INTERNAL_SERVER_ERROR

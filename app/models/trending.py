"""Scored trending records produced by the trending engine."""
# ruff: noqa: UP017

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, conint, confloat


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class TrendingFactors(BaseModel):
    """Rounded sub-scores feeding the composite trending score."""

    model_config = ConfigDict(frozen=True)

    funding_momentum: conint(ge=0, le=100)  # type: ignore[valid-type]
    growth_rate: conint(ge=0, le=100)  # type: ignore[valid-type]
    market_interest: conint(ge=0, le=100)  # type: ignore[valid-type]
    investor_activity: conint(ge=0, le=100)  # type: ignore[valid-type]
    time_relevance: conint(ge=0, le=100)  # type: ignore[valid-type]
    overall_trending: conint(ge=0, le=100)  # type: ignore[valid-type]


class CompanyTrending(BaseModel):
    """Trending result for a single company."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str
    trending_score: conint(ge=0, le=100)  # type: ignore[valid-type]
    trending_factors: TrendingFactors
    trend_direction: TrendDirection
    percentage_change: confloat(ge=0)  # type: ignore[valid-type]
    rank: conint(ge=0) = 0  # type: ignore[valid-type]
    last_updated: datetime = Field(default_factory=_utcnow)


class SectorTrend(BaseModel):
    """Aggregated trending score for one category."""

    sector: str
    average_trending_score: int
    company_count: int
    top_company: str


class TrendDistribution(BaseModel):
    up: int = 0
    down: int = 0
    stable: int = 0


class TrendingStats(BaseModel):
    """Population-level summary of a scoring run."""

    total_companies: int = 0
    average_trending_score: int = 0
    trending_up: int = 0
    trending_down: int = 0
    stable: int = 0
    top_score: int = 0
    top_company: str = "N/A"
    distribution: TrendDistribution = Field(default_factory=TrendDistribution)


class TrendingSnapshot(BaseModel):
    """Ranked scoring run across the tracked population."""

    trending: list[CompanyTrending]
    total_companies: int
    generated_at: datetime = Field(default_factory=_utcnow)

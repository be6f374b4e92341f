"""Test helpers for building tracked companies and trending records."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.models.company import CompanyRecord, InvestorContext, TrackedCompany
from app.models.trending import CompanyTrending, TrendDirection, TrendingFactors

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def make_company(
    company_id: str,
    *,
    name: str | None = None,
    category: str = "Cloud Security",
    total_funding: float = 50_000_000,
    funding_rounds_count: int = 2,
    days_since_funding: int | None = 30,
    founded_year: int = 2022,
    growth_rate: float | None = 100,
    investors: list[str] | None = None,
    now: datetime = FIXED_NOW,
) -> TrackedCompany:
    """Build a TrackedCompany whose last round is ``days_since_funding`` before ``now``."""
    last_funding = now - timedelta(days=days_since_funding) if days_since_funding is not None else None
    record = CompanyRecord(
        id=company_id,
        name=name or company_id.replace("-", " ").title(),
        category=category,
        total_funding=total_funding,
        funding_rounds_count=funding_rounds_count,
        last_funding_date=last_funding,
        founded_year=founded_year,
        growth_rate=growth_rate,
    )
    context = InvestorContext(investors=investors) if investors is not None else None
    return TrackedCompany(record=record, investors=context)


def make_trending(
    company_id: str,
    score: int,
    *,
    category: str = "Cloud Security",
    direction: TrendDirection = TrendDirection.STABLE,
) -> CompanyTrending:
    """Build a scored record directly, bypassing the scorer."""
    factors = TrendingFactors(
        funding_momentum=score,
        growth_rate=score,
        market_interest=score,
        investor_activity=score,
        time_relevance=score,
        overall_trending=score,
    )
    return CompanyTrending(
        id=company_id,
        name=company_id.title(),
        category=category,
        trending_score=score,
        trending_factors=factors,
        trend_direction=direction,
        percentage_change=0.0,
        last_updated=FIXED_NOW,
    )

"""Deterministic trending-factor scoring over company records.

Every function here is pure: inputs are never mutated and the only
non-deterministic output is the ``last_updated`` timestamp. Date-based
factors accept an explicit ``now`` so runs can be replayed.
"""
# ruff: noqa: UP017

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Final, Protocol

from app.models.company import CompanyRecord, InvestorContext
from app.models.trending import (
    CompanyTrending,
    SectorTrend,
    TrendDirection,
    TrendDistribution,
    TrendingFactors,
    TrendingStats,
)

SECONDS_PER_DAY: Final[int] = 86_400
DAYS_PER_MONTH: Final[int] = 30

FUNDING_SIZE_UNIT: Final[float] = 100_000_000
CATEGORY_FUNDING_UNIT: Final[float] = 1_000_000_000
PREMIUM_INVESTORS: Final[tuple[str, ...]] = ("Sequoia", "a16z", "Accel", "Benchmark", "Founders Fund")
PREMIUM_BOOST: Final[int] = 30

FACTOR_WEIGHTS: Final[dict[str, float]] = {
    "funding_momentum": 0.25,
    "growth_rate": 0.20,
    "market_interest": 0.20,
    "investor_activity": 0.20,
    "time_relevance": 0.15,
}
STABLE_THRESHOLD_PCT: Final[float] = 5.0
SIMULATED_PREVIOUS_FACTOR: Final[float] = 0.85
DEFAULT_LIMIT: Final[int] = 10


class MarketPeer(Protocol):
    """Minimal shape needed for cohort comparison."""

    category: str
    total_funding: float


@dataclass(frozen=True)
class TrendResult:
    direction: TrendDirection
    percentage_change: float


def calculate_funding_momentum(
    total_funding: float,
    last_funding_date: datetime | None,
    funding_rounds_count: int,
    *,
    now: datetime | None = None,
) -> float:
    """Blend recency, size and frequency of funding into a 0-100 score."""
    total_funding = max(total_funding or 0, 0)
    if last_funding_date is None or total_funding == 0:
        return 0.0

    days = _days_since(last_funding_date, now)
    recency = max(0.0, 100 - days / 3)
    size = min(100.0, (total_funding / FUNDING_SIZE_UNIT) * 50)
    frequency = min(100.0, max(funding_rounds_count or 0, 0) * 25)
    return _clamp(recency * 0.5 + size * 0.3 + frequency * 0.2)


def calculate_market_interest(category: str, population: Sequence[MarketPeer]) -> float:
    """Score how crowded and well-funded a category is within the population.

    Category comparison is exact and case-sensitive, unlike
    :func:`get_trending_by_category`.
    """
    if not population:
        return 0.0
    cohort = [peer for peer in population if peer.category == category]
    cohort_funding = sum(max(peer.total_funding or 0, 0) for peer in cohort)
    popularity = min(100.0, (len(cohort) / len(population)) * 200)
    investment = min(100.0, (cohort_funding / CATEGORY_FUNDING_UNIT) * 50)
    return _clamp(popularity * 0.6 + investment * 0.4)


def calculate_investor_activity(investors: Sequence[str] | None, lead_investor: str | None = None) -> float:
    """Score investor breadth with a boost for watchlist firms.

    ``lead_investor`` is accepted for call-site symmetry and does not affect
    the score.
    """
    if not investors:
        return 0.0
    diversity = min(100, len(investors) * 20)
    watchlist = [premium.lower() for premium in PREMIUM_INVESTORS]
    has_premium = any(
        isinstance(investor, str) and any(premium in investor.lower() for premium in watchlist)
        for investor in investors
    )
    boost = PREMIUM_BOOST if has_premium else 0
    return float(min(100, diversity + boost))


def calculate_time_relevance(
    founded_year: int,
    last_funding_date: datetime | None,
    *,
    now: datetime | None = None,
) -> float:
    """Favor young companies with recent funding activity."""
    current = _resolve_now(now)
    age = current.year - founded_year
    age_score = max(0, 100 - age * 10)
    activity_boost = 0
    if last_funding_date is not None:
        months = _days_since(last_funding_date, current) // DAYS_PER_MONTH
        activity_boost = max(0, 50 - months * 5)
    return _clamp(age_score * 0.6 + activity_boost * 0.4)


def calculate_trend_direction(current_score: float, previous_score: float = 0) -> TrendResult:
    """Classify movement between two scores; moves under 5% are stable."""
    change = current_score - previous_score
    percentage = (change / previous_score) * 100 if previous_score > 0 else 0.0
    if abs(percentage) < STABLE_THRESHOLD_PCT:
        direction = TrendDirection.STABLE
    elif change > 0:
        direction = TrendDirection.UP
    else:
        direction = TrendDirection.DOWN
    return TrendResult(direction=direction, percentage_change=abs(percentage))


def calculate_trending_factors(
    company: CompanyRecord,
    population: Sequence[MarketPeer],
    funding: InvestorContext | None = None,
    *,
    previous_score: float | None = None,
    now: datetime | None = None,
) -> CompanyTrending:
    """Score one company against the full population.

    When ``previous_score`` is omitted the prior score is simulated as
    ``SIMULATED_PREVIOUS_FACTOR`` times the fresh score.
    """
    current = _resolve_now(now)
    funding_momentum = calculate_funding_momentum(
        company.total_funding,
        company.last_funding_date,
        company.funding_rounds_count,
        now=current,
    )
    growth_rate = _clamp((company.growth_rate or 0) / 2)
    market_interest = calculate_market_interest(company.category, population)
    investor_activity = (
        calculate_investor_activity(funding.investors, funding.lead_investor) if funding else 0.0
    )
    time_relevance = calculate_time_relevance(company.founded_year, company.last_funding_date, now=current)

    overall = int(
        _clamp(
            round_half_up(
                funding_momentum * FACTOR_WEIGHTS["funding_momentum"]
                + growth_rate * FACTOR_WEIGHTS["growth_rate"]
                + market_interest * FACTOR_WEIGHTS["market_interest"]
                + investor_activity * FACTOR_WEIGHTS["investor_activity"]
                + time_relevance * FACTOR_WEIGHTS["time_relevance"]
            )
        )
    )

    previous = overall * SIMULATED_PREVIOUS_FACTOR if previous_score is None else previous_score
    trend = calculate_trend_direction(overall, previous)

    factors = TrendingFactors(
        funding_momentum=_score(funding_momentum),
        growth_rate=_score(growth_rate),
        market_interest=_score(market_interest),
        investor_activity=_score(investor_activity),
        time_relevance=_score(time_relevance),
        overall_trending=overall,
    )
    return CompanyTrending(
        id=company.id,
        name=company.name,
        category=company.category,
        trending_score=overall,
        trending_factors=factors,
        trend_direction=trend.direction,
        percentage_change=float(round_half_up(trend.percentage_change)),
        rank=0,
        last_updated=current,
    )


def rank_trending_companies(items: Iterable[CompanyTrending]) -> list[CompanyTrending]:
    """Sort descending by score and assign 1-based ranks; ties keep input order."""
    ordered = _by_score(items)
    return [item.model_copy(update={"rank": index}) for index, item in enumerate(ordered, start=1)]


def get_trending_by_category(
    items: Iterable[CompanyTrending],
    category: str,
    limit: int = DEFAULT_LIMIT,
) -> list[CompanyTrending]:
    """Filter by case-insensitive substring match on category."""
    needle = category.lower()
    matches = [item for item in items if needle in item.category.lower()]
    return _by_score(matches)[: max(0, limit)]


def get_top_trending(items: Iterable[CompanyTrending], limit: int = DEFAULT_LIMIT) -> list[CompanyTrending]:
    return _by_score(items)[: max(0, limit)]


def get_trending_sectors(items: Iterable[CompanyTrending]) -> list[SectorTrend]:
    """Aggregate scores per category, highest average first."""
    groups: dict[str, list[CompanyTrending]] = {}
    for item in items:
        groups.setdefault(item.category, []).append(item)

    sectors: list[SectorTrend] = []
    for sector, members in groups.items():
        top = members[0]
        for member in members[1:]:
            if member.trending_score > top.trending_score:
                top = member
        total = sum(member.trending_score for member in members)
        sectors.append(
            SectorTrend(
                sector=sector,
                average_trending_score=round_half_up(total / len(members)),
                company_count=len(members),
                top_company=top.name,
            )
        )
    return sorted(sectors, key=lambda entry: entry.average_trending_score, reverse=True)


def summarize_trending(items: Iterable[CompanyTrending]) -> TrendingStats:
    """Population statistics for a scoring run."""
    population = list(items)
    if not population:
        return TrendingStats()

    total = len(population)
    counts = {direction: 0 for direction in TrendDirection}
    for item in population:
        counts[item.trend_direction] += 1
    top = _by_score(population)[0]
    return TrendingStats(
        total_companies=total,
        average_trending_score=round_half_up(sum(item.trending_score for item in population) / total),
        trending_up=counts[TrendDirection.UP],
        trending_down=counts[TrendDirection.DOWN],
        stable=counts[TrendDirection.STABLE],
        top_score=top.trending_score,
        top_company=top.name,
        distribution=TrendDistribution(
            up=round_half_up(counts[TrendDirection.UP] / total * 100),
            down=round_half_up(counts[TrendDirection.DOWN] / total * 100),
            stable=round_half_up(counts[TrendDirection.STABLE] / total * 100),
        ),
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 rounding towards positive infinity."""
    return math.floor(value + 0.5)


def _by_score(items: Iterable[CompanyTrending]) -> list[CompanyTrending]:
    return sorted(items, key=lambda item: item.trending_score, reverse=True)


def _score(value: float) -> int:
    return int(_clamp(round_half_up(value)))


def _days_since(moment: datetime, now: datetime | None) -> int:
    current = _resolve_now(now)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    elapsed = (current - moment).total_seconds()
    return max(0, math.floor(elapsed / SECONDS_PER_DAY))


def _resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return max(lower, min(upper, value))

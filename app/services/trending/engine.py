"""Trending engine that scores the tracked population and serves ranked views."""
# ruff: noqa: UP017

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from app.config import settings
from app.models.company import TrackedCompany
from app.models.trending import CompanyTrending, SectorTrend, TrendingSnapshot, TrendingStats
from app.observability.metrics import metrics
from app.services.trending.errors import (
    TrendingDataUnavailableError,
    TrendingError,
    TrendingNotFoundError,
    TrendingValidationError,
)
from app.services.trending.factors import (
    calculate_trending_factors,
    get_top_trending,
    get_trending_by_category,
    get_trending_sectors,
    rank_trending_companies,
    summarize_trending,
)
from app.services.trending.repositories import (
    CompanyRepository,
    InMemoryScoreHistory,
    ScoreHistory,
    build_company_repository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendingContext:
    """Configuration bundle for the trending engine."""

    simulate_history: bool
    default_limit: int


class TrendingEngine:
    """Scores every tracked company and exposes ranked, filtered and aggregate views."""

    def __init__(
        self,
        *,
        repository: CompanyRepository | None = None,
        history: ScoreHistory | None = None,
        context: TrendingContext | None = None,
    ) -> None:
        self._repository = repository if repository is not None else build_company_repository()
        self._history = history if history is not None else InMemoryScoreHistory()
        self._context = context or _build_context()

    @property
    def default_limit(self) -> int:
        return self._context.default_limit

    def compute_snapshot(
        self,
        *,
        record_history: bool = False,
        now: datetime | None = None,
    ) -> TrendingSnapshot:
        """Score the full population, rank it and optionally record the run."""
        start = time.perf_counter()
        generated_at = now or datetime.now(timezone.utc)
        metrics_tags = {"record_history": record_history}
        try:
            companies = self._repository.list()
            if not companies:
                raise TrendingDataUnavailableError(
                    "No companies available for trending analysis.",
                    code="404_NO_TRENDING_DATA",
                )
            population = [company.record for company in companies]
            scored = [self._score(company, population, now=generated_at) for company in companies]
            ranked = rank_trending_companies(scored)

            if record_history:
                for item in ranked:
                    self._history.record(item.id, item.trending_score, recorded_at=generated_at)

            metrics.gauge("trending.population", len(ranked), tags=metrics_tags)
            metrics.increment("trending.snapshot.success", tags=metrics_tags)
            logger.info(
                "trending.snapshot.computed",
                extra={
                    "companies": len(ranked),
                    "top_company": ranked[0].name,
                    "top_score": ranked[0].trending_score,
                    "record_history": record_history,
                },
            )
            return TrendingSnapshot(
                trending=ranked,
                total_companies=len(companies),
                generated_at=generated_at,
            )
        except TrendingError as exc:
            metrics.increment("trending.snapshot.errors", tags={**metrics_tags, "code": exc.code})
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            metrics.timing("trending.snapshot.latency_ms", elapsed_ms, tags=metrics_tags)

    def top(self, limit: int | None = None) -> list[CompanyTrending]:
        snapshot = self.compute_snapshot()
        return get_top_trending(snapshot.trending, self._resolve_limit(limit))

    def by_category(self, category: str, limit: int | None = None) -> list[CompanyTrending]:
        if not category:
            raise TrendingValidationError("Category parameter required.", code="400_CATEGORY_REQUIRED")
        snapshot = self.compute_snapshot()
        return get_trending_by_category(snapshot.trending, category, self._resolve_limit(limit))

    def sectors(self) -> list[SectorTrend]:
        return get_trending_sectors(self.compute_snapshot().trending)

    def company(self, company_id: str) -> CompanyTrending:
        if not company_id:
            raise TrendingValidationError("Company ID required.", code="400_COMPANY_ID_REQUIRED")
        snapshot = self.compute_snapshot()
        for item in snapshot.trending:
            if item.id == company_id:
                return item
        raise TrendingNotFoundError(f"Company {company_id} not found.", code="404_COMPANY_NOT_FOUND")

    def stats(self) -> TrendingStats:
        return summarize_trending(self.compute_snapshot().trending)

    def _score(
        self,
        company: TrackedCompany,
        population: list,
        *,
        now: datetime,
    ) -> CompanyTrending:
        return calculate_trending_factors(
            company.record,
            population,
            company.investors,
            previous_score=self._previous_score(company.company_id),
            now=now,
        )

    def _previous_score(self, company_id: str) -> float | None:
        entry = self._history.latest(company_id)
        if entry is not None:
            return float(entry.score)
        # None lets the scorer fall back to its simulated previous score.
        return None if self._context.simulate_history else 0.0

    def _resolve_limit(self, limit: int | None) -> int:
        if limit is None:
            return self._context.default_limit
        return max(0, limit)


def _build_context() -> TrendingContext:
    return TrendingContext(
        simulate_history=settings.trending_simulate_history,
        default_limit=settings.trending_default_limit,
    )


_ENGINE_INSTANCE: TrendingEngine | None = None


def get_trending_engine() -> TrendingEngine:
    """Singleton accessor used by API routes."""
    global _ENGINE_INSTANCE  # noqa: PLW0603
    if _ENGINE_INSTANCE is None:
        _ENGINE_INSTANCE = TrendingEngine()
    return _ENGINE_INSTANCE

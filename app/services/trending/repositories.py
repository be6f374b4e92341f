"""In-memory backends for tracked companies and trending score history."""
# ruff: noqa: UP017

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Protocol

from pydantic import ValidationError

from app.config import settings
from app.models.company import CompanyRecord, InvestorContext, TrackedCompany
from app.observability.metrics import metrics
from app.services.trending.errors import TrendingDataError

logger = logging.getLogger(__name__)

_INVESTOR_KEYS = ("investors", "lead_investor")


class CompanyRepository(Protocol):
    """Source of the population scored by the trending engine."""

    def list(self) -> list[TrackedCompany]:
        ...

    def get(self, company_id: str) -> TrackedCompany | None:
        ...

    def upsert(self, company: TrackedCompany) -> TrackedCompany:
        ...


class InMemoryCompanyRepository(CompanyRepository):
    """Thread-safe repository used for API/local development."""

    def __init__(self, companies: Iterable[TrackedCompany] | None = None) -> None:
        self._companies: dict[str, TrackedCompany] = {}
        self._lock = Lock()
        for company in companies or []:
            self.upsert(company)

    def list(self) -> list[TrackedCompany]:
        with self._lock:
            return list(self._companies.values())

    def get(self, company_id: str) -> TrackedCompany | None:
        with self._lock:
            return self._companies.get(company_id)

    def upsert(self, company: TrackedCompany) -> TrackedCompany:
        with self._lock:
            created = company.company_id not in self._companies
            self._companies[company.company_id] = company
        metrics.increment(
            "trending.repository.upserted",
            tags={"repository": "memory", "created": created},
        )
        return company

    def __len__(self) -> int:
        with self._lock:
            return len(self._companies)


@dataclass(frozen=True)
class ScoreEntry:
    score: int
    recorded_at: datetime


class ScoreHistory(Protocol):
    """Previous trending scores used for trend direction."""

    def latest(self, company_id: str) -> ScoreEntry | None:
        ...

    def record(self, company_id: str, score: int, *, recorded_at: datetime | None = None) -> ScoreEntry:
        ...

    def entries(self, company_id: str) -> list[ScoreEntry]:
        ...


class InMemoryScoreHistory(ScoreHistory):
    """Bounded per-company score history, newest last."""

    def __init__(self, *, depth: int | None = None) -> None:
        self._depth = max(1, depth or settings.trending_history_depth)
        self._entries: dict[str, deque[ScoreEntry]] = {}
        self._lock = Lock()

    def latest(self, company_id: str) -> ScoreEntry | None:
        with self._lock:
            history = self._entries.get(company_id)
            return history[-1] if history else None

    def record(self, company_id: str, score: int, *, recorded_at: datetime | None = None) -> ScoreEntry:
        entry = ScoreEntry(score=score, recorded_at=recorded_at or datetime.now(timezone.utc))
        with self._lock:
            self._entries.setdefault(company_id, deque(maxlen=self._depth)).append(entry)
        return entry

    def entries(self, company_id: str) -> list[ScoreEntry]:
        with self._lock:
            return list(self._entries.get(company_id, ()))


def parse_company(payload: Mapping[str, Any]) -> TrackedCompany:
    """Build a TrackedCompany from a raw payload with optional investor keys."""
    record_payload = {key: value for key, value in payload.items() if key not in _INVESTOR_KEYS}
    record = CompanyRecord(**record_payload)
    investors = None
    if any(key in payload for key in _INVESTOR_KEYS):
        investors = InvestorContext(
            investors=payload.get("investors"),
            lead_investor=payload.get("lead_investor"),
        )
    return TrackedCompany(record=record, investors=investors)


def load_companies(path: Path) -> list[TrackedCompany]:
    """Load companies from a JSON array or a ``{"companies": [...]}`` document."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise TrendingDataError(
            f"Unable to read companies from {path}: {exc}",
            code="422_INVALID_COMPANY_DATA",
        ) from exc

    if isinstance(data, Mapping):
        data = data.get("companies", [])
    if not isinstance(data, list):
        raise TrendingDataError(
            f"Expected a list of companies in {path}.",
            code="422_INVALID_COMPANY_DATA",
        )

    companies: list[TrackedCompany] = []
    for index, payload in enumerate(data):
        if not isinstance(payload, Mapping):
            raise TrendingDataError(
                f"Company entry {index} in {path} is not an object.",
                code="422_INVALID_COMPANY_DATA",
            )
        try:
            companies.append(parse_company(payload))
        except ValidationError as exc:
            raise TrendingDataError(
                f"Company entry {index} in {path} is invalid: {exc.error_count()} error(s).",
                code="422_INVALID_COMPANY_DATA",
            ) from exc
    logger.info("trending.companies.loaded", extra={"path": str(path), "count": len(companies)})
    return companies


def build_company_repository(seed_path: str | Path | None = None) -> InMemoryCompanyRepository:
    """Instantiate the company repository, seeding it when a fixture exists."""
    resolved = seed_path or settings.trending_seed_path
    if not resolved:
        logger.info("trending.repository.initialized", extra={"backend": "memory", "seeded": False})
        return InMemoryCompanyRepository()
    path = Path(resolved).expanduser()
    if not path.exists():
        logger.warning("trending.repository.seed_missing", extra={"path": str(path)})
        return InMemoryCompanyRepository()
    repository = InMemoryCompanyRepository(load_companies(path))
    logger.info(
        "trending.repository.initialized",
        extra={"backend": "memory", "seeded": True, "count": len(repository)},
    )
    return repository

"""Domain models for tracked companies and their investor context."""
# ruff: noqa: UP017

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CATEGORY = "General Security"


class CompanyRecord(BaseModel):
    """Snapshot of a company as supplied by the data layer."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    category: str = DEFAULT_CATEGORY
    total_funding: float = 0.0
    last_funding_date: datetime | None = None
    funding_rounds_count: int = 0
    founded_year: int
    growth_rate: float | None = None
    current_stage: str | None = None

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_CATEGORY
        return value

    @field_validator("total_funding", "funding_rounds_count", mode="after")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        return max(value, 0)

    @field_validator("last_funding_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: object) -> object:
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        return value

    @field_validator("last_funding_date", mode="after")
    @classmethod
    def _utc_timestamp(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class InvestorContext(BaseModel):
    """Investors attached to a company's most recent funding round."""

    model_config = ConfigDict(frozen=True)

    investors: list[str] = Field(default_factory=list)
    lead_investor: str | None = None

    @field_validator("investors", mode="before")
    @classmethod
    def _coerce_investors(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            try:
                value = json.loads(value) if value.strip() else []
            except ValueError:
                return []
            if not isinstance(value, list):
                return []
        if not isinstance(value, (list, tuple)):
            raise ValueError("investors must be a list of names")
        return [entry if isinstance(entry, str) else str(entry) for entry in value if entry is not None]


@dataclass(frozen=True)
class TrackedCompany:
    """Repository row pairing a company with optional investor context."""

    record: CompanyRecord
    investors: InvestorContext | None = None

    @property
    def company_id(self) -> str:
        return self.record.id

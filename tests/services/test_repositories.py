import json
from datetime import timedelta
from pathlib import Path

import pytest

from app.models.company import DEFAULT_CATEGORY
from app.services.trending.errors import TrendingDataError
from app.services.trending.repositories import (
    InMemoryCompanyRepository,
    InMemoryScoreHistory,
    build_company_repository,
    load_companies,
    parse_company,
)
from tests.utils import FIXED_NOW, make_company

SEED_FIXTURE = Path("fixtures/trending/companies.json")


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_repository_preserves_order_and_upserts_in_place():
    first = make_company("alpha")
    second = make_company("beta")
    repository = InMemoryCompanyRepository([first, second])

    replacement = make_company("alpha", name="Alpha Renamed")
    repository.upsert(replacement)

    assert [company.company_id for company in repository.list()] == ["alpha", "beta"]
    assert repository.get("alpha").record.name == "Alpha Renamed"
    assert repository.get("gamma") is None
    assert len(repository) == 2


def test_score_history_is_bounded_and_returns_latest():
    history = InMemoryScoreHistory(depth=2)
    history.record("alpha", 10, recorded_at=FIXED_NOW - timedelta(days=2))
    history.record("alpha", 20, recorded_at=FIXED_NOW - timedelta(days=1))
    history.record("alpha", 30, recorded_at=FIXED_NOW)

    assert [entry.score for entry in history.entries("alpha")] == [20, 30]
    assert history.latest("alpha").score == 30
    assert history.latest("beta") is None
    assert history.entries("beta") == []


def test_parse_company_splits_investor_context():
    tracked = parse_company(
        {
            "id": "oneleet",
            "name": "Oneleet",
            "category": "Application Security",
            "founded_year": 2023,
            "investors": '["Dawn Capital", "Sequoia"]',
            "lead_investor": "Dawn Capital",
        }
    )

    assert tracked.record.id == "oneleet"
    assert tracked.investors is not None
    assert tracked.investors.investors == ["Dawn Capital", "Sequoia"]
    assert tracked.investors.lead_investor == "Dawn Capital"


@pytest.mark.parametrize("investors", [5, {"Accel": True}])
def test_load_companies_rejects_non_list_investors(tmp_path: Path, investors):
    path = _write(
        tmp_path / "companies.json",
        [{"id": "a", "name": "A", "founded_year": 2020, "investors": investors}],
    )
    with pytest.raises(TrendingDataError) as excinfo:
        load_companies(path)
    assert excinfo.value.code == "422_INVALID_COMPANY_DATA"


def test_parse_company_without_investor_keys_has_no_context():
    tracked = parse_company({"id": "solo", "name": "Solo", "founded_year": 2021})
    assert tracked.investors is None
    assert tracked.record.category == DEFAULT_CATEGORY


def test_load_companies_accepts_wrapped_document(tmp_path: Path):
    path = _write(
        tmp_path / "companies.json",
        {"companies": [{"id": "a", "name": "A", "founded_year": 2020}]},
    )
    companies = load_companies(path)
    assert [company.company_id for company in companies] == ["a"]


def test_load_companies_rejects_invalid_entries(tmp_path: Path):
    path = _write(tmp_path / "companies.json", [{"id": "a", "name": "A"}])
    with pytest.raises(TrendingDataError) as excinfo:
        load_companies(path)
    assert excinfo.value.code == "422_INVALID_COMPANY_DATA"


def test_load_companies_rejects_non_list_payload(tmp_path: Path):
    path = _write(tmp_path / "companies.json", {"companies": {"id": "a"}})
    with pytest.raises(TrendingDataError):
        load_companies(path)


def test_load_companies_rejects_malformed_json(tmp_path: Path):
    path = tmp_path / "companies.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(TrendingDataError) as excinfo:
        load_companies(path)
    assert excinfo.value.code == "422_INVALID_COMPANY_DATA"


def test_build_company_repository_seeds_from_fixture():
    repository = build_company_repository(SEED_FIXTURE)

    companies = repository.list()
    assert len(companies) == 7
    legacy = repository.get("legacy-shield")
    assert legacy.record.category == DEFAULT_CATEGORY
    oneleet = repository.get("oneleet")
    assert "Sequoia Capital" in oneleet.investors.investors


def test_build_company_repository_missing_seed_is_empty(tmp_path: Path):
    repository = build_company_repository(tmp_path / "missing.json")
    assert repository.list() == []

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.company import TrackedCompany
from app.services.trending.engine import TrendingContext, TrendingEngine
from app.services.trending.repositories import InMemoryCompanyRepository, InMemoryScoreHistory
from tests.utils import make_company


@pytest.fixture
def tracked_companies() -> list[TrackedCompany]:
    """Three companies with clearly separated trending scores."""
    return [
        make_company(
            "laggard-labs",
            category="Legacy Security",
            total_funding=1_000_000,
            funding_rounds_count=1,
            days_since_funding=900,
            founded_year=2008,
            growth_rate=5,
        ),
        make_company(
            "rocket-sec",
            category="Cloud Security",
            total_funding=220_000_000,
            funding_rounds_count=4,
            days_since_funding=5,
            founded_year=2024,
            growth_rate=180,
            investors=["Sequoia Capital", "Accel", "Index Ventures"],
        ),
        make_company(
            "steady-shield",
            category="Cloud Security Posture",
            total_funding=40_000_000,
            funding_rounds_count=2,
            days_since_funding=120,
            founded_year=2020,
            growth_rate=60,
            investors=["Insight Partners"],
        ),
    ]


@pytest.fixture
def engine(tracked_companies) -> TrendingEngine:
    return TrendingEngine(
        repository=InMemoryCompanyRepository(tracked_companies),
        history=InMemoryScoreHistory(depth=5),
        context=TrendingContext(simulate_history=True, default_limit=10),
    )


@pytest.fixture
def client():
    """Create test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client

from app.main import app
from app.services.trending.engine import get_trending_engine


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readiness_check_uses_engine(client, engine):
    app.dependency_overrides[get_trending_engine] = lambda: engine
    try:
        response = client.get("/health/ready")
    finally:
        app.dependency_overrides.pop(get_trending_engine, None)
    assert response.status_code == 200
    assert response.json()["default_limit"] == 10


def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Welcome" in response.json()["message"]

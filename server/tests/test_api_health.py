"""API health tests against the fully configured application."""

import pytest
from httpx import ASGITransport, AsyncClient

from aerodemo.main import create_app


@pytest.mark.asyncio
async def test_api_health_endpoints():
    """Test the health endpoints of the real application."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

        # The test database is an in-memory SQLite engine
        response = await client.get("/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["database"] == "ok"
        assert data["checks"]["notifications"] == "disabled"

        response = await client.get("/info")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "aerodemo-api"
        assert data["features"]["strict_status_transitions"] is False


@pytest.mark.asyncio
async def test_metrics_endpoint():
    """Test the metrics endpoint."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.asyncio
async def test_validation_errors_are_problem_details():
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/v1/presentation/submit", json={"city": "Curitiba"})

    assert response.status_code == 400
    data = response.json()
    assert data["type"].endswith("/validation-error")
    assert {"date", "time", "description"} <= {v["path"] for v in data["violations"]}

"""
Tests for health check endpoints.
"""

from httpx import AsyncClient

from shortener.core.config import settings


async def test_health_check(client: AsyncClient) -> None:
    """Test basic health check."""
    response = await client.get(f"{settings.API_V1_PREFIX}/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == settings.PROJECT_NAME
    assert data["version"] == settings.VERSION


async def test_database_health_check(client: AsyncClient) -> None:
    """Test database health check."""
    response = await client.get(f"{settings.API_V1_PREFIX}/health/db")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"

"""
Tests for health and utility endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.unit
class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient) -> None:
        """Test basic health check endpoint returns 200."""
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"

    async def test_key_status(self, client: AsyncClient) -> None:
        """Test that the key status endpoint reports provisioning."""
        response = await client.get("/health/keys")
        assert response.status_code == 200
        data = response.json()
        assert isinstance(data["signing_keys_configured"], bool)
        assert data["status"] in ("healthy", "degraded")

    async def test_root_endpoint(self, client: AsyncClient) -> None:
        """Test root endpoint returns API info."""
        response = await client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Votaciones"


@pytest.mark.unit
class TestAPIDocumentation:
    """Test API documentation endpoints."""

    async def test_openapi_schema_available(self, client: AsyncClient) -> None:
        """Test OpenAPI schema is accessible (only in debug mode)."""
        from core.config import settings

        response = await client.get("/openapi.json")
        if settings.DEBUG:
            assert response.status_code == 200
            assert "/api/v1/tokens/verify/{token}" in response.json()["paths"]
        else:
            assert response.status_code == 404

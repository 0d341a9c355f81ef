"""Tests for service info and health endpoints."""

import httpx
import pytest

from app.infrastructure.config import settings


@pytest.mark.asyncio
async def test_service_info(client: httpx.AsyncClient) -> None:
    """Root endpoint describes the service."""
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == settings.service_name
    assert data["status"] == "running"
    assert data["endpoints"]["categories"] == "/api/categories"
    assert data["endpoints"]["products"] == "/api/products"


@pytest.mark.asyncio
async def test_health_check(client: httpx.AsyncClient) -> None:
    """Test health endpoint returns healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "catalog-core"
    assert data["version"] == settings.api_version


@pytest.mark.asyncio
async def test_readiness_check(client: httpx.AsyncClient) -> None:
    """Readiness queries the database."""
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["database"] == "ok"

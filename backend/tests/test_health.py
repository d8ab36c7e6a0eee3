"""Tests for health check endpoint."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test that health endpoint returns ok status."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "version" in data
    assert data["store"] == "memory"
    assert data["sessions"] == 0
    assert data["unlock_sync"] is True
    assert data["unlock_synced_seconds_ago"] >= 0


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    """Test that root endpoint returns API info."""
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Words of Healing"
    assert "version" in data
    assert "docs" in data


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    """Every response carries a short correlation id."""
    response = await client.get("/health")
    assert len(response.headers["X-Request-ID"]) == 8

"""Health endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status and version."""
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_checks_database_through_session(client):
    resp = await client.get("/api/v1/health")
    data = resp.json()
    assert data["database"] == "ok"
    assert data["status"] == "healthy"


@pytest.mark.asyncio
async def test_health_without_redis_is_still_healthy(client):
    """Redis is optional — not initialized in tests."""
    resp = await client.get("/api/v1/health")
    data = resp.json()
    assert data["redis"] == "unavailable"
    assert data["status"] == "healthy"


@pytest.mark.asyncio
async def test_health_needs_no_credentials(client):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200

"""Tests for security middleware — headers, request IDs, rate limiting.

Learn: Redis is not initialized in tests, so the rate limiter normally
passes everything through. The rate-limit tests patch in an AsyncMock
client to drive the counter.
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from bizdesk.middleware import rate_limit
from bizdesk.middleware.rate_limit import bucket_for


@pytest.mark.asyncio
async def test_security_headers_on_health(client):
    """Health endpoint returns security headers."""
    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "Cache-Control" not in r.headers


@pytest.mark.asyncio
async def test_auth_responses_are_not_cached(client):
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@acme.com", "password": "whatever"},
    )
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_hsts_only_over_https(client):
    r = await client.get("/api/v1/health")
    assert "Strict-Transport-Security" not in r.headers

    r = await client.get("/api/v1/health", headers={"X-Forwarded-Proto": "https"})
    assert r.headers["Strict-Transport-Security"] == "max-age=31536000; includeSubDomains"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    """Each request gets a unique X-Request-ID header."""
    r1 = await client.get("/api/v1/health")
    r2 = await client.get("/api/v1/health")
    assert "X-Request-ID" in r1.headers
    assert "X-Request-ID" in r2.headers
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    """Incoming X-Request-ID is propagated through the response."""
    custom_id = "test-trace-12345"
    r = await client.get("/api/v1/health", headers={"X-Request-ID": custom_id})
    assert r.headers["X-Request-ID"] == custom_id


@pytest.mark.asyncio
async def test_oversized_request_id_replaced(client):
    r = await client.get("/api/v1/health", headers={"X-Request-ID": "x" * 500})
    assert r.headers["X-Request-ID"] != "x" * 500
    assert len(r.headers["X-Request-ID"]) == 36


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    """HSTS header is NOT set on HTTP connections (only HTTPS)."""
    r = await client.get("/api/v1/health")
    assert "Strict-Transport-Security" not in r.headers


# ─── Rate limiting ──────────────────────────────────────


def test_credential_endpoints_share_the_auth_bucket():
    assert bucket_for("/api/v1/auth/login") == "auth"
    assert bucket_for("/api/v1/auth/register") == "auth"
    assert bucket_for("/api/v1/auth/refresh-token") == "auth"
    assert bucket_for("/api/v1/auth/me") == "api"
    assert bucket_for("/api/v1/crm/leads") == "api"


@pytest.mark.asyncio
async def test_rate_limit_headers_when_redis_available(client, monkeypatch):
    redis = AsyncMock()
    redis.incr.return_value = 1
    monkeypatch.setattr(rate_limit, "get_redis", lambda: redis)

    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.headers["X-RateLimit-Limit"] == "100"
    assert r.headers["X-RateLimit-Remaining"] == "99"
    redis.expire.assert_awaited_once()


@pytest.mark.asyncio
async def test_rate_limit_exceeded_on_login(client, monkeypatch):
    redis = AsyncMock()
    redis.incr.return_value = 11
    monkeypatch.setattr(rate_limit, "get_redis", lambda: redis)

    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "someone@acme.com", "password": "whatever"},
    )
    assert r.status_code == 429
    assert r.headers["Retry-After"] == "60"
    assert r.json()["success"] is False
    key = redis.incr.await_args.args[0]
    assert key.startswith("bizdesk:rl:") and ":auth:" in key


@pytest.mark.asyncio
async def test_rate_limit_skipped_on_redis_error(client, monkeypatch):
    redis = AsyncMock()
    redis.incr.side_effect = RedisConnectionError("down")
    monkeypatch.setattr(rate_limit, "get_redis", lambda: redis)

    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert "X-RateLimit-Limit" not in r.headers

"""Deny-list tests — in-memory and Redis-backed."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from bizdesk.auth.revocation import InMemoryDenyList, RedisDenyList


def in_(seconds: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=seconds)


@pytest.mark.asyncio
async def test_in_memory_contains_until_expiry():
    deny = InMemoryDenyList()
    await deny.add("live", in_(60))
    await deny.add("dead", in_(-1))
    assert await deny.contains("live")
    assert not await deny.contains("dead")
    assert not await deny.contains("never-added")


@pytest.mark.asyncio
async def test_in_memory_purges_expired_entries():
    deny = InMemoryDenyList()
    await deny.add("old", in_(-10))
    await deny.add("new", in_(60))
    assert len(deny) == 1


@pytest.mark.asyncio
async def test_redis_sets_key_with_remaining_ttl():
    redis = AsyncMock()
    deny = RedisDenyList(redis)
    await deny.add("abc", in_(120))

    redis.set.assert_awaited_once()
    key, value = redis.set.await_args.args
    assert key == "bizdesk:revoked:abc"
    assert value == "1"
    assert 110 <= redis.set.await_args.kwargs["ex"] <= 120


@pytest.mark.asyncio
async def test_redis_skips_already_expired():
    redis = AsyncMock()
    await RedisDenyList(redis).add("abc", in_(-5))
    redis.set.assert_not_awaited()


@pytest.mark.asyncio
async def test_redis_contains_checks_key():
    redis = AsyncMock()
    redis.exists.return_value = 1
    assert await RedisDenyList(redis, prefix="t").contains("abc")
    redis.exists.assert_awaited_once_with("t:abc")

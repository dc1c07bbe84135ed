"""Credential deny-list — server-side revocation keyed by token id (jti).

Learn: Without revocation, logout only clears the cookies and a copied
access token stays valid until it expires. With BIZDESK_REVOCATION_ENABLED
the logout endpoint deny-lists both credentials and the authentication
gate rejects any listed jti.

Entries only need to live as long as the token would have: once the
token expires, verify() rejects it anyway. Both backends use that as
the entry TTL, so the list never grows beyond the set of live tokens.
"""

import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone

import redis.asyncio as aioredis


class DenyList(ABC):
    """Store of revoked token ids."""

    @abstractmethod
    async def add(self, token_id: str, expires_at: datetime) -> None:
        """Revoke `token_id` until `expires_at`."""

    @abstractmethod
    async def contains(self, token_id: str) -> bool:
        """True if `token_id` is revoked and not yet expired."""


def _remaining_seconds(expires_at: datetime) -> int:
    return int((expires_at - datetime.now(timezone.utc)).total_seconds())


class InMemoryDenyList(DenyList):
    """Per-process deny-list. Suitable for a single worker and for tests."""

    def __init__(self):
        self._entries: dict[str, float] = {}

    async def add(self, token_id: str, expires_at: datetime) -> None:
        self._entries[token_id] = expires_at.timestamp()
        self._purge()

    async def contains(self, token_id: str) -> bool:
        expires = self._entries.get(token_id)
        if expires is None:
            return False
        if time.time() >= expires:
            del self._entries[token_id]
            return False
        return True

    def __len__(self) -> int:
        return len(self._entries)

    def _purge(self) -> None:
        now = time.time()
        for token_id in [t for t, exp in self._entries.items() if exp <= now]:
            del self._entries[token_id]


class RedisDenyList(DenyList):
    """Deny-list shared across workers, one key per jti with a TTL."""

    def __init__(self, redis: aioredis.Redis, prefix: str = "bizdesk:revoked"):
        self.redis = redis
        self.prefix = prefix

    def _key(self, token_id: str) -> str:
        return f"{self.prefix}:{token_id}"

    async def add(self, token_id: str, expires_at: datetime) -> None:
        ttl = _remaining_seconds(expires_at)
        if ttl <= 0:
            return  # already expired, nothing to deny
        await self.redis.set(self._key(token_id), "1", ex=ttl)

    async def contains(self, token_id: str) -> bool:
        return bool(await self.redis.exists(self._key(token_id)))

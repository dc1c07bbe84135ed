"""FastAPI auth dependencies — the authentication gate.

Learn: These are used as Depends() in route handlers to turn a request's
credential into an ActorContext, and to enforce a permission on top:

    @router.post("/", dependencies=[Depends(require_permission(Permission.CRM_CREATE))])

Credential lookup order:
1. `token` cookie (browser SPA, httpOnly)
2. `Authorization: Bearer <token>` header (scripts, non-browser clients)

"Identity not found" and "identity disabled" raise the same Unauthorized
error with the same message — callers can't tell which accounts exist.
Store outages raise StoreUnavailable (503), never 401/403.
"""

import uuid
from functools import lru_cache
from typing import Optional

import structlog
from fastapi import Depends, Request
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.authorization import authorize
from bizdesk.auth.context import ActorContext
from bizdesk.auth.errors import (
    MalformedCredential,
    NoCredential,
    RevokedCredential,
    StoreUnavailable,
    Unauthorized,
)
from bizdesk.auth.jwt import TokenClaims, TokenConfig, TokenIssuer
from bizdesk.auth.permissions import Permission
from bizdesk.auth.revocation import DenyList, InMemoryDenyList, RedisDenyList
from bizdesk.config import settings
from bizdesk.db.engine import get_db
from bizdesk.db.models import User

logger = structlog.get_logger()

# Fallback when revocation is on but Redis is not — per-process only.
_local_deny_list = InMemoryDenyList()


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Process-wide issuer built once from settings."""
    return TokenIssuer(TokenConfig.from_settings(settings))


def get_deny_list(
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Optional[DenyList]:
    """The active deny-list, or None when revocation is disabled."""
    if not issuer.config.revocation_enabled:
        return None
    from bizdesk.cache.client import get_redis

    try:
        return RedisDenyList(get_redis())
    except RuntimeError:
        return _local_deny_list


def extract_credential(request: Request) -> str:
    """Access token from the cookie, falling back to the Bearer header."""
    token = request.cookies.get(settings.access_cookie_name)
    if not token:
        authorization = request.headers.get("Authorization", "")
        if authorization.startswith("Bearer "):
            token = authorization[7:].strip()
    if not token:
        raise NoCredential()
    return token


async def ensure_not_revoked(
    claims: TokenClaims, deny_list: Optional[DenyList]
) -> None:
    if deny_list is None:
        return
    try:
        revoked = await deny_list.contains(claims.token_id)
    except RedisError as e:
        logger.error("auth.store_unavailable", store="redis", error=str(e))
        raise StoreUnavailable() from e
    if revoked:
        raise RevokedCredential()


async def load_active_user(db: AsyncSession, user_id: str) -> User:
    """Fetch the identity behind a token. Missing and inactive look identical."""
    try:
        key = uuid.UUID(user_id)
    except ValueError:
        raise MalformedCredential()

    try:
        user = await db.get(User, key)
    except SQLAlchemyError as e:
        logger.error("auth.store_unavailable", store="database", error=str(e))
        raise StoreUnavailable() from e

    if user is None or not user.active:
        raise Unauthorized()
    return user


async def get_current_actor(
    request: Request,
    db: AsyncSession = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
    deny_list: Optional[DenyList] = Depends(get_deny_list),
) -> ActorContext:
    """Resolve the request's credential to an actor (401 on any failure)."""
    token = extract_credential(request)
    try:
        claims = issuer.verify(token, "access")
    except Unauthorized as e:
        logger.info("auth.token_rejected", reason=type(e).__name__)
        raise

    await ensure_not_revoked(claims, deny_list)
    user = await load_active_user(db, claims.user_id)

    actor = ActorContext(
        user_id=user.id,
        # Role is the snapshot from issuance; permissions are always fresh.
        role=claims.role,
        permissions=frozenset(user.permissions or ()),
        organization_id=user.organization_id,
        token_id=claims.token_id,
    )
    request.state.actor = actor
    structlog.contextvars.bind_contextvars(user_id=str(actor.user_id))
    return actor


def require_permission(permission: Permission):
    """Dependency factory: authenticate, then require `permission`.

    The permission is checked against the catalog when the route is
    declared, so a typo fails at import time rather than denying forever.
    """
    permission = Permission(permission)

    async def checker(actor: ActorContext = Depends(get_current_actor)) -> ActorContext:
        return authorize(actor, permission)

    checker.__name__ = f"require_{permission.domain}_{permission.action}"
    return checker

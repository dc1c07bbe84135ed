"""Auth API — registration, login, token refresh, logout.

Learn: Routes for the credential lifecycle:
- POST /auth/register → new user + their organization (201)
- POST /auth/login → email/password → access + refresh cookies
- POST /auth/refresh-token → refresh cookie → new access cookie
- POST /auth/logout → clear both cookies (always 200)
- GET /auth/me → current user + organization

Both credentials travel as httpOnly cookies (SameSite=strict, Secure in
production). The access token is also returned in the login body for
non-browser clients that send it as a Bearer header.

The refresh credential is NOT rotated on refresh; it stays valid until
it expires (or until logout deny-lists it, when revocation is enabled).
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, EmailStr, Field, field_validator
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.context import ActorContext
from bizdesk.auth.dependencies import (
    ensure_not_revoked,
    get_current_actor,
    get_deny_list,
    get_token_issuer,
    load_active_user,
)
from bizdesk.auth.errors import NoCredential, Unauthorized
from bizdesk.auth.jwt import TokenIssuer, TokenKind
from bizdesk.auth.revocation import DenyList
from bizdesk.config import settings
from bizdesk.db.engine import get_db
from bizdesk.schemas.user import OrgRead, UserRead
from bizdesk.services.user_service import UserExists, UserService

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")


# ─── Schemas ─────────────────────────────────────────────


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters long")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    user: UserRead
    access_token: str
    token_type: str = "bearer"


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    user: UserRead
    organization: Optional[OrgRead] = None


# ─── Cookies ─────────────────────────────────────────────


def _set_access_cookie(response: Response, token: str, issuer: TokenIssuer) -> None:
    response.set_cookie(
        settings.access_cookie_name,
        token,
        max_age=int(issuer.config.access_ttl.total_seconds()),
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def _set_refresh_cookie(response: Response, token: str, issuer: TokenIssuer) -> None:
    response.set_cookie(
        settings.refresh_cookie_name,
        token,
        max_age=int(issuer.config.refresh_ttl.total_seconds()),
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def _clear_cookies(response: Response) -> None:
    for name in (settings.access_cookie_name, settings.refresh_cookie_name):
        response.delete_cookie(
            name, httponly=True, secure=settings.is_production, samesite="strict"
        )


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=UserRead, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create a user account; the new user administers a fresh organization."""
    try:
        return await UserService(db).register(
            username=body.username, email=body.email, password=body.password
        )
    except UserExists:
        raise HTTPException(status_code=409, detail="User already exists")


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Login with email and password → access + refresh cookies."""
    user = await UserService(db).authenticate(body.email, body.password)
    if user is None:
        logger.info("auth.login_failed")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    access_token = issuer.issue_access(str(user.id), user.role)
    refresh_token = issuer.issue_refresh(str(user.id))
    _set_access_cookie(response, access_token, issuer)
    _set_refresh_cookie(response, refresh_token, issuer)

    logger.info("auth.login", user_id=str(user.id), role=user.role)
    return LoginResponse(user=UserRead.model_validate(user), access_token=access_token)


# ─── Refresh ────────────────────────────────────────────


@router.post("/refresh-token", response_model=AccessTokenResponse)
async def refresh_token(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
    deny_list: Optional[DenyList] = Depends(get_deny_list),
):
    """Exchange the refresh cookie for a new access token.

    The new access token carries the role as stored *now*, so this is
    where a role change reaches an already-logged-in user.
    """
    token = request.cookies.get(settings.refresh_cookie_name)
    if not token:
        raise NoCredential("Refresh token required")

    try:
        claims = issuer.verify(token, "refresh")
    except Unauthorized as e:
        logger.info("auth.refresh_rejected", reason=type(e).__name__)
        raise Unauthorized("Invalid refresh token") from e

    await ensure_not_revoked(claims, deny_list)
    user = await load_active_user(db, claims.user_id)

    access_token = issuer.issue_access(str(user.id), user.role)
    _set_access_cookie(response, access_token, issuer)

    logger.info("auth.refreshed", user_id=str(user.id))
    return AccessTokenResponse(access_token=access_token)


# ─── Logout ─────────────────────────────────────────────


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    issuer: TokenIssuer = Depends(get_token_issuer),
    deny_list: Optional[DenyList] = Depends(get_deny_list),
):
    """Clear both cookies. Never fails.

    With revocation enabled, any still-valid credential presented is
    deny-listed for the rest of its lifetime.
    """
    if deny_list is not None:
        presented: list[tuple[str, TokenKind]] = [
            (request.cookies.get(settings.access_cookie_name), "access"),
            (request.cookies.get(settings.refresh_cookie_name), "refresh"),
        ]
        for token, kind in presented:
            if not token:
                continue
            try:
                claims = issuer.verify(token, kind)
            except Unauthorized:
                continue  # expired or garbage: nothing to revoke
            try:
                await deny_list.add(claims.token_id, claims.expires_at)
            except RedisError as e:
                logger.warning("auth.revoke_failed", kind=kind, error=str(e))
            else:
                logger.info("auth.revoked", user_id=claims.user_id, kind=kind)

    _clear_cookies(response)
    return {"success": True, "message": "Logged out successfully"}


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=MeResponse)
async def get_me(
    actor: ActorContext = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """The authenticated user and their organization."""
    svc = UserService(db)
    user = await svc.get_active(str(actor.user_id))
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    organization = await svc.get_organization(user.organization_id)
    return MeResponse(
        user=UserRead.model_validate(user),
        organization=OrgRead.model_validate(organization) if organization else None,
    )

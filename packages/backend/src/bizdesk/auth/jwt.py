"""JWT credential creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
- Access token: short-lived (60min), carries user id + role snapshot
- Refresh token: long-lived (7 days), carries only the user id

The two kinds are signed with different secrets, so a refresh token can
never pass as an access token (and vice versa) even if the "type" claim
were forged. Every token gets a "jti" so it can be deny-listed when
revocation is enabled.

The issuer takes an immutable TokenConfig at construction instead of
reading the settings singleton — tests build their own issuers with
their own secrets and lifetimes.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

import jwt

from bizdesk.auth.errors import ExpiredCredential, MalformedCredential

TokenKind = Literal["access", "refresh"]


@dataclass(frozen=True)
class TokenConfig:
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=60)
    refresh_ttl: timedelta = timedelta(days=7)
    revocation_enabled: bool = False

    @classmethod
    def from_settings(cls, settings) -> "TokenConfig":
        return cls(
            access_secret=settings.access_token_secret,
            refresh_secret=settings.refresh_token_secret,
            algorithm=settings.jwt_algorithm,
            access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
            revocation_enabled=settings.revocation_enabled,
        )


@dataclass(frozen=True)
class TokenClaims:
    """Decoded, verified token payload."""

    user_id: str
    kind: TokenKind
    token_id: str
    expires_at: datetime
    role: Optional[str] = None


class TokenIssuer:
    """Issues and verifies access/refresh credentials."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def issue_access(
        self,
        user_id: str,
        role: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create an access token embedding the user id and role."""
        return self._encode(
            {"sub": str(user_id), "role": str(role), "type": "access"},
            self.config.access_secret,
            expires_delta if expires_delta is not None else self.config.access_ttl,
        )

    def issue_refresh(
        self,
        user_id: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create a refresh token embedding only the user id."""
        return self._encode(
            {"sub": str(user_id), "type": "refresh"},
            self.config.refresh_secret,
            expires_delta if expires_delta is not None else self.config.refresh_ttl,
        )

    def verify(self, token: str, kind: TokenKind = "access") -> TokenClaims:
        """Verify and decode a token of the given kind.

        Raises ExpiredCredential if the signature is valid but the token
        is past its expiry, MalformedCredential for anything else
        (bad signature, bad structure, wrong kind, missing claims).
        """
        secret = (
            self.config.access_secret if kind == "access" else self.config.refresh_secret
        )
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                options={"require": ["sub", "exp", "jti"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredCredential()
        except jwt.InvalidTokenError:
            raise MalformedCredential()

        if payload.get("type") != kind:
            raise MalformedCredential("Wrong token type")
        if kind == "access" and not payload.get("role"):
            raise MalformedCredential()

        return TokenClaims(
            user_id=str(payload["sub"]),
            kind=kind,
            token_id=str(payload["jti"]),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            role=payload.get("role"),
        )

    def _encode(self, claims: dict, secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=self.config.algorithm)

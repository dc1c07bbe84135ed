"""Test fixtures — an isolated SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets a fresh SQLite file (aiosqlite driver, foreign keys
   enforced by build_engine) with the schema created from Base.metadata.
   The models use portable column types, so the same tables work on
   PostgreSQL and SQLite.
2. get_db is overridden to hand every request its own session from the
   test engine, exactly like production does with Postgres.
3. get_token_issuer is overridden with an issuer built from a test
   TokenConfig, so tests can mint credentials (including expired ones)
   for users they create directly in the database.

Nothing is mocked in the auth pipeline itself: protected routes run the
real authentication gate, authorization gate and ownership filter.
"""

import itertools
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from bizdesk.auth import password as password_module
from bizdesk.auth.dependencies import get_deny_list, get_token_issuer
from bizdesk.auth.jwt import TokenConfig, TokenIssuer
from bizdesk.auth.password import hash_password
from bizdesk.auth.revocation import InMemoryDenyList
from bizdesk.db.engine import build_engine, build_session_factory, get_db
from bizdesk.db.models import Base, Organization, User
from bizdesk.main import app

TEST_TOKEN_CONFIG = TokenConfig(
    access_secret="test-access-secret",
    refresh_secret="test-refresh-secret",
)

DEFAULT_PASSWORD = "password123"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt work factor — hashing dominates test time otherwise."""
    monkeypatch.setattr(password_module, "BCRYPT_ROUNDS", 4)


@pytest_asyncio.fixture()
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'bizdesk.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Session for arranging and inspecting test data directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def issuer():
    return TokenIssuer(TEST_TOKEN_CONFIG)


@pytest.fixture()
def deny_list():
    return InMemoryDenyList()


async def _make_client(session_factory, overrides: dict):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides.update(overrides)
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture()
async def client(session_factory, issuer):
    """HTTP client running the real auth pipeline against the test DB."""
    ac = await _make_client(session_factory, {get_token_issuer: lambda: issuer})
    async with ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def revoking_client(session_factory, deny_list):
    """Like `client`, with revocation enabled and an in-memory deny-list."""
    revoking_issuer = TokenIssuer(
        TokenConfig(
            access_secret=TEST_TOKEN_CONFIG.access_secret,
            refresh_secret=TEST_TOKEN_CONFIG.refresh_secret,
            revocation_enabled=True,
        )
    )
    ac = await _make_client(
        session_factory,
        {
            get_token_issuer: lambda: revoking_issuer,
            get_deny_list: lambda: deny_list,
        },
    )
    async with ac:
        yield ac
    app.dependency_overrides.clear()


# ─── Data factories ─────────────────────────────────────


@pytest_asyncio.fixture()
async def org(db_session):
    org = Organization(name="Acme Corp", domain="acme.com")
    db_session.add(org)
    await db_session.commit()
    await db_session.refresh(org)
    return org


@pytest_asyncio.fixture()
async def other_org(db_session):
    org = Organization(name="Globex", domain="globex.com")
    db_session.add(org)
    await db_session.commit()
    await db_session.refresh(org)
    return org


_UNSET = object()


@pytest.fixture()
def make_user(db_session, org):
    """Factory: create a user directly in the database.

    Users land in the `org` fixture's organization unless `organization`
    is given (pass None for a user without one).
    """
    counter = itertools.count(1)

    async def _make(
        role: str = "viewer",
        permissions: tuple = (),
        organization=_UNSET,
        active: bool = True,
        password: str = DEFAULT_PASSWORD,
        username: Optional[str] = None,
    ) -> User:
        n = next(counter)
        name = username or f"{role}{n}"
        if organization is _UNSET:
            organization = org
        user = User(
            username=name,
            email=f"{name}@acme.com",
            password_hash=hash_password(password),
            role=role,
            permissions=[str(p) for p in permissions],
            organization_id=organization.id if organization is not None else None,
            active=active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def auth_headers(issuer):
    """Factory: Bearer header with a fresh access token for `user`."""

    def _headers(user: User, role: Optional[str] = None) -> dict:
        token = issuer.issue_access(str(user.id), role or user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


def set_cookies(response) -> dict[str, str]:
    """Name → value of every cookie the response sets (empty value = cleared)."""
    from http.cookies import SimpleCookie

    jar = SimpleCookie()
    for header in response.headers.get_list("set-cookie"):
        jar.load(header)
    return {name: morsel.value for name, morsel in jar.items()}


def set_cookie_headers(response) -> dict[str, str]:
    """Name → raw Set-Cookie header, for attribute assertions."""
    headers = {}
    for header in response.headers.get_list("set-cookie"):
        name = header.split("=", 1)[0]
        headers[name] = header
    return headers

"""CLI and test-identity seeding tests."""

import asyncio
import json

import pytest
from click.testing import CliRunner
from sqlalchemy import func, select

from bizdesk.auth.password import verify_password
from bizdesk.auth.permissions import DEFAULT_ROLE_PERMISSIONS, Role
from bizdesk.cli.main import main
from bizdesk.db import engine as engine_module
from bizdesk.db.models import Base, Organization, User
from bizdesk.services.seed import TEST_ORG_DOMAIN, seed_test_users


# ─── Seeding service ────────────────────────────────────


@pytest.mark.asyncio
async def test_seed_creates_test_identities(db_session):
    outcome = await seed_test_users(db_session)
    assert [created for _, created in outcome] == [True, True, True]

    result = await db_session.execute(select(User).order_by(User.username))
    users = {u.email: u for u in result.scalars().all()}
    assert set(users) == {"admin@test.com", "manager@test.com", "viewer@test.com"}

    admin = users["admin@test.com"]
    assert admin.role == "admin"
    assert verify_password("Admin123!", admin.password_hash)
    viewer = users["viewer@test.com"]
    assert viewer.permissions == [p.value for p in DEFAULT_ROLE_PERMISSIONS[Role.VIEWER]]

    org = await db_session.get(Organization, admin.organization_id)
    assert org.domain == TEST_ORG_DOMAIN


@pytest.mark.asyncio
async def test_seed_is_idempotent(db_session):
    await seed_test_users(db_session)
    outcome = await seed_test_users(db_session, password="changed-password")
    assert [created for _, created in outcome] == [False, False, False]

    count = await db_session.scalar(select(func.count()).select_from(User))
    assert count == 3
    orgs = await db_session.scalar(select(func.count()).select_from(Organization))
    assert orgs == 1

    # Existing users keep their original password.
    result = await db_session.execute(select(User).where(User.email == "admin@test.com"))
    assert verify_password("Admin123!", result.scalars().one().password_hash)


@pytest.mark.asyncio
async def test_seed_password_override(db_session):
    await seed_test_users(db_session, password="shared-secret")
    result = await db_session.execute(select(User))
    for user in result.scalars().all():
        assert verify_password("shared-secret", user.password_hash)


# ─── Commands ───────────────────────────────────────────


@pytest.fixture()
def cli_db(tmp_path, monkeypatch):
    """Point the CLI's engine + session factory at a fresh SQLite file."""
    engine = engine_module.build_engine(f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")

    async def _create_schema():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_create_schema())
    monkeypatch.setattr(engine_module, "engine", engine)
    monkeypatch.setattr(
        engine_module,
        "async_session_factory",
        engine_module.build_session_factory(engine),
    )
    return engine


def test_seed_users_rejects_short_password():
    result = CliRunner().invoke(main, ["seed-users", "--password", "abc"])
    assert result.exit_code == 2
    assert "at least 6 characters" in result.output


def test_seed_then_list_users(cli_db):
    runner = CliRunner()

    result = runner.invoke(main, ["seed-users"])
    assert result.exit_code == 0, result.output
    assert "Created admin" in result.output
    assert "admin@test.com / Admin123!" in result.output

    result = runner.invoke(main, ["seed-users"])
    assert result.exit_code == 0, result.output
    assert "Exists  admin" in result.output

    result = runner.invoke(main, ["list-users", "--json"])
    assert result.exit_code == 0, result.output
    rows = json.loads(result.output)
    assert sorted(r["email"] for r in rows) == [
        "admin@test.com",
        "manager@test.com",
        "viewer@test.com",
    ]


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "bizdesk" in result.output

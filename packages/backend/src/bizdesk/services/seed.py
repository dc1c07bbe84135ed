"""Test identities for local development.

Learn: Seeding is idempotent: the test organization is looked up by its
domain and each user by email, and anything that already exists is left
untouched (including its password), so the command can be re-run freely.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.password import hash_password
from bizdesk.auth.permissions import DEFAULT_ROLE_PERMISSIONS, Role
from bizdesk.db.models import Module, Organization, User

logger = structlog.get_logger()

TEST_ORG_NAME = "Test Organization"
TEST_ORG_DOMAIN = "test.com"


@dataclass(frozen=True)
class SeedUser:
    username: str
    email: str
    password: str
    role: Role


TEST_USERS = (
    SeedUser("admin", "admin@test.com", "Admin123!", Role.ADMIN),
    SeedUser("manager", "manager@test.com", "Manager123!", Role.MANAGER),
    SeedUser("viewer", "viewer@test.com", "Viewer123!", Role.VIEWER),
)


async def ensure_test_org(db: AsyncSession) -> Organization:
    result = await db.execute(
        select(Organization).where(Organization.domain == TEST_ORG_DOMAIN)
    )
    org = result.scalars().first()
    if org is None:
        org = Organization(
            name=TEST_ORG_NAME,
            domain=TEST_ORG_DOMAIN,
            modules=[m.value for m in Module],
        )
        db.add(org)
        await db.flush()
        logger.info("seed.org_created", org_id=str(org.id))
    return org


async def seed_test_users(
    db: AsyncSession, password: Optional[str] = None
) -> list[tuple[SeedUser, bool]]:
    """Create the test organization and users. Returns (user, created) pairs.

    `password` overrides every seed user's default password.
    """
    org = await ensure_test_org(db)
    outcome = []
    for seed in TEST_USERS:
        result = await db.execute(select(User).where(User.email == seed.email))
        if result.scalars().first() is not None:
            outcome.append((seed, False))
            continue
        db.add(
            User(
                username=seed.username,
                email=seed.email,
                password_hash=hash_password(password or seed.password),
                role=seed.role,
                permissions=[p.value for p in DEFAULT_ROLE_PERMISSIONS[seed.role]],
                organization_id=org.id,
                first_name=seed.username,
            )
        )
        outcome.append((seed, True))
        logger.info("seed.user_created", email=seed.email, role=seed.role.value)
    await db.commit()
    return outcome

"""User service — registration, login, and identity administration.

Learn: Registration auto-provisions an organization and makes the new
user its admin, so a fresh account is immediately usable. Everything
else here is scoped to the acting user's organization: an admin of one
organization can't see or modify users of another.

Role and permission mutations are plain last-writer-wins updates. The
next request by the affected user sees the new permission set (it is
read fresh by the auth gate); a role change takes effect at their next
token issuance (login or refresh).
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.context import ActorContext
from bizdesk.auth.errors import Forbidden, SelfRoleChangeForbidden
from bizdesk.auth.password import hash_password, verify_password
from bizdesk.auth.permissions import REGISTRATION_PERMISSIONS, Role
from bizdesk.db.models import Module, Organization, User

logger = structlog.get_logger()


class UserExists(ValueError):
    """Username or email already registered."""


class UserInUse(ValueError):
    """The user still owns records that reference them."""


class DomainTaken(ValueError):
    """Another organization already uses this domain."""


def user_scope_clause(actor: ActorContext):
    """Users the actor may see: their organization, or only themselves without one."""
    if actor.organization_id is not None:
        return User.organization_id == actor.organization_id
    return User.id == actor.user_id


class UserService:
    """Business logic for identities and their organization."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Registration + login ───────────────────────────

    async def register(self, username: str, email: str, password: str) -> User:
        """Create an admin account and its organization."""
        email = email.strip().lower()
        username = username.strip()
        existing = await self.db.execute(
            select(User).where(or_(User.email == email, User.username == username))
        )
        if existing.scalars().first():
            raise UserExists(email)

        domain = email.split("@", 1)[1]
        taken = await self.db.execute(
            select(Organization.id).where(Organization.domain == domain)
        )
        if taken.first() is not None:
            # Shared mail domains (gmail.com, ...) — the org goes without one.
            domain = None

        org = Organization(
            name=f"{username}'s Organization",
            domain=domain,
            modules=[m.value for m in Module],
        )
        self.db.add(org)
        await self.db.flush()

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=Role.ADMIN,
            permissions=[p.value for p in REGISTRATION_PERMISSIONS],
            organization_id=org.id,
            first_name=username,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info("users.registered", user_id=str(user.id), org_id=str(org.id))
        return user

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user for valid credentials, else None.

        Unknown email, inactive account and wrong password are
        indistinguishable to the caller.
        """
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        user = result.scalars().first()
        if user is None or not user.active:
            return None
        if not verify_password(password, user.password_hash):
            return None

        user.last_login_at = datetime.now(timezone.utc)
        await self.db.commit()
        logger.info("users.logged_in", user_id=str(user.id))
        return user

    async def get_active(self, user_id: str) -> Optional[User]:
        try:
            key = uuid.UUID(str(user_id))
        except ValueError:
            return None
        user = await self.db.get(User, key)
        if user is None or not user.active:
            return None
        return user

    async def get_organization(self, org_id: Optional[uuid.UUID]) -> Optional[Organization]:
        if org_id is None:
            return None
        return await self.db.get(Organization, org_id)

    async def update_organization(
        self, actor: ActorContext, changes: dict[str, Any]
    ) -> Optional[Organization]:
        org = await self.get_organization(actor.organization_id)
        if org is None:
            return None
        if "modules" in changes:
            changes["modules"] = [str(m) for m in changes["modules"]]
        for key, value in changes.items():
            setattr(org, key, value)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DomainTaken(changes.get("domain"))
        await self.db.refresh(org)
        logger.info("org.updated", org_id=str(org.id), fields=sorted(changes))
        return org

    # ─── Administration (scoped to the actor's organization) ─

    def _scope(self, actor: ActorContext):
        return user_scope_clause(actor)

    async def list_users(self, actor: ActorContext) -> list[User]:
        result = await self.db.execute(
            select(User).where(self._scope(actor)).order_by(User.username)
        )
        return list(result.scalars().all())

    async def get_user(self, actor: ActorContext, user_id: uuid.UUID) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.id == user_id, self._scope(actor))
        )
        return result.scalars().first()

    async def update_user(
        self, actor: ActorContext, user_id: uuid.UUID, changes: dict[str, Any]
    ) -> Optional[User]:
        user = await self.get_user(actor, user_id)
        if user is None:
            return None

        # Only admins may change role and active status; others' attempts are ignored.
        role = changes.pop("role", None)
        active = changes.pop("active", None)
        if actor.is_admin:
            if role is not None and Role(role) != user.role:
                self._ensure_not_self(actor, user, SelfRoleChangeForbidden())
                user.role = role
            if active is not None:
                user.active = active

        if "email" in changes or "username" in changes:
            await self._ensure_unique(user, changes.get("username"), changes.get("email"))
        for key, value in changes.items():
            setattr(user, key, value)

        await self.db.commit()
        await self.db.refresh(user)
        logger.info("users.updated", user_id=str(user.id), by=str(actor.user_id))
        return user

    async def delete_user(self, actor: ActorContext, user_id: uuid.UUID) -> bool:
        user = await self.get_user(actor, user_id)
        if user is None:
            return False
        await self.db.delete(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise UserInUse(str(user_id))
        logger.info("users.deleted", user_id=str(user_id), by=str(actor.user_id))
        return True

    async def change_role(
        self, actor: ActorContext, user_id: uuid.UUID, role: Role
    ) -> Optional[User]:
        user = await self.get_user(actor, user_id)
        if user is None:
            return None
        self._ensure_not_self(actor, user, SelfRoleChangeForbidden())
        user.role = role
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(
            "users.role_changed", user_id=str(user.id), role=str(role), by=str(actor.user_id)
        )
        return user

    async def set_permissions(
        self, actor: ActorContext, user_id: uuid.UUID, permissions: list[str]
    ) -> Optional[User]:
        user = await self.get_user(actor, user_id)
        if user is None:
            return None
        self._ensure_not_self(actor, user, Forbidden("Cannot change your own permissions"))
        user.permissions = [str(p) for p in permissions]
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(
            "users.permissions_changed",
            user_id=str(user.id),
            permissions=user.permissions,
            by=str(actor.user_id),
        )
        return user

    # ─── Helpers ────────────────────────────────────────

    @staticmethod
    def _ensure_not_self(actor: ActorContext, user: User, error: Forbidden) -> None:
        if str(user.id) == str(actor.user_id):
            logger.warning("authz.self_change_denied", user_id=str(actor.user_id))
            raise error

    async def _ensure_unique(
        self, user: User, username: Optional[str], email: Optional[str]
    ) -> None:
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email.strip().lower())
        result = await self.db.execute(
            select(User.id).where(or_(*clauses), User.id != user.id)
        )
        if result.first() is not None:
            raise UserExists(email or username)

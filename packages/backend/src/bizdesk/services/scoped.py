"""Base service for organization-scoped, owner-aware resources.

Learn: Every CRUD service for an owned resource looks the same:
- list: SELECT narrowed by organization scope + visibility
- get: SELECT by id inside the organization scope (None = 404), then
  the ownership filter decides read access (Forbidden = 403)
- create: stamp organization_id and the owner from the actor
- update/delete: fetch in scope, ensure_can(), apply, commit

Subclasses set `model`, `policy` and `order_by`, and override the hooks
they need (e.g. invoices recompute totals in `_prepare`).
"""

import uuid
from typing import Any, Generic, Optional, TypeVar

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.context import ActorContext
from bizdesk.auth.ownership import OwnershipPolicy, ensure_can, narrow_listing, scope_lookup
from bizdesk.db.models import Base, User
from bizdesk.services.user_service import user_scope_clause

ModelT = TypeVar("ModelT", bound=Base)

logger = structlog.get_logger()


class ResourceInUse(ValueError):
    """Other records still reference the row being deleted."""


class UnknownMember(ValueError):
    """A referenced user does not exist in the actor's scope."""

    def __init__(self, user_ids):
        self.user_ids = sorted(str(u) for u in user_ids)
        super().__init__(f"Unknown user(s): {', '.join(self.user_ids)}")


class ScopedResourceService(Generic[ModelT]):
    model: type[ModelT]
    policy: OwnershipPolicy
    order_by: tuple = ()
    label: str = "resource"
    # Columns holding user ids (one id, or a list of ids) that must resolve
    # to users the actor can see.
    member_fields: tuple[str, ...] = ()

    def __init__(self, db: AsyncSession, actor: ActorContext):
        self.db = db
        self.actor = actor

    async def list(self) -> list[ModelT]:
        stmt = narrow_listing(select(self.model), self.model, self.actor, self.policy)
        if self.order_by:
            stmt = stmt.order_by(*self.order_by)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find(self, resource_id: uuid.UUID) -> Optional[ModelT]:
        """Fetch inside the actor's organization scope, no ownership check."""
        stmt = scope_lookup(
            select(self.model).where(self.model.id == resource_id),
            self.model,
            self.actor,
            self.policy,
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get(self, resource_id: uuid.UUID) -> Optional[ModelT]:
        resource = await self.find(resource_id)
        if resource is not None:
            ensure_can("read", self.actor, resource, self.policy)
        return resource

    async def create(self, data: dict[str, Any]) -> ModelT:
        await self._check_members(data)
        fields = self._prepare(dict(data))
        if getattr(self.model, "organization_id", None) is not None:
            fields["organization_id"] = self.actor.organization_id
        if fields.get(self.policy.owner_attr) is None:
            fields[self.policy.owner_attr] = self.actor.user_id
        resource = self.model(**fields)
        self.db.add(resource)
        await self.db.commit()
        await self.db.refresh(resource)
        logger.info(
            f"{self.label}.created",
            resource_id=str(resource.id),
            user_id=str(self.actor.user_id),
        )
        return resource

    async def update(self, resource_id: uuid.UUID, changes: dict[str, Any]) -> Optional[ModelT]:
        resource = await self.find(resource_id)
        if resource is None:
            return None
        ensure_can("update", self.actor, resource, self.policy)
        await self._check_members(changes)
        self._apply(resource, self._prepare(dict(changes)))
        await self.db.commit()
        await self.db.refresh(resource)
        logger.info(
            f"{self.label}.updated",
            resource_id=str(resource.id),
            user_id=str(self.actor.user_id),
            fields=sorted(changes),
        )
        return resource

    async def delete(self, resource_id: uuid.UUID) -> bool:
        resource = await self.find(resource_id)
        if resource is None:
            return False
        ensure_can("delete", self.actor, resource, self.policy)
        await self._before_delete(resource)
        await self.db.delete(resource)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ResourceInUse(str(resource_id))
        logger.info(
            f"{self.label}.deleted",
            resource_id=str(resource_id),
            user_id=str(self.actor.user_id),
        )
        return True

    async def _check_members(self, fields: dict[str, Any]) -> None:
        wanted = set()
        for name in self.member_fields:
            value = fields.get(name)
            if value is None:
                continue
            wanted.update(value if isinstance(value, (list, tuple, set)) else [value])
        if not wanted:
            return
        ids = {uuid.UUID(str(u)) for u in wanted}
        result = await self.db.execute(
            select(User.id).where(User.id.in_(ids), user_scope_clause(self.actor))
        )
        missing = ids - set(result.scalars().all())
        if missing:
            raise UnknownMember(missing)

    # ─── Hooks ──────────────────────────────────────────

    def _prepare(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Convert validated input into column values."""
        return fields

    def _apply(self, resource: ModelT, fields: dict[str, Any]) -> None:
        for key, value in fields.items():
            setattr(resource, key, value)

    async def _before_delete(self, resource: ModelT) -> None:
        pass

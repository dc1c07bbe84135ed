"""Ownership filter — owner-scoped access layered on top of permissions.

Learn: The authorization gate answers "may this actor do X in this
domain at all?". This module answers "may they do it to THIS row?".
Each resource kind declares its rules once as an OwnershipPolicy:

- owner_attr: which column holds the owner's user id
- allow_generic_update / allow_generic_delete: whether holding
  "<domain>:update" / "<domain>:delete" is enough to modify someone
  else's row. Posts say no (author-only); the org-scoped business
  records say yes.
- shared_when: attribute values that make a row visible to non-owners
  (posts: status=published AND visibility=public). Kinds without it are
  visible to any holder of "<domain>:read" in the same scope.
- org_scoped: rows carry organization_id and are confined to the
  actor's organization (or to their own rows when they have none).

Listing endpoints never filter in Python — narrow_listing() adds the
predicate to the SELECT so out-of-scope rows never leave the database.
"""

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import Select, and_, or_

from bizdesk.auth.authorization import is_allowed
from bizdesk.auth.context import ActorContext
from bizdesk.auth.errors import Forbidden
from bizdesk.auth.permissions import ALL_PERMISSIONS, Role

logger = structlog.get_logger()

# Roles that see every row of a shared_when resource, not just their own
# plus the shared ones.
ELEVATED_VISIBILITY_ROLES = frozenset({Role.ADMIN.value})


@dataclass(frozen=True)
class OwnershipPolicy:
    domain: str
    owner_attr: str
    allow_generic_update: bool = True
    allow_generic_delete: bool = True
    shared_when: tuple[tuple[str, str], ...] = ()
    org_scoped: bool = True

    def __post_init__(self):
        for action in ("read", "update", "delete"):
            if self.permission(action) not in ALL_PERMISSIONS:
                raise ValueError(f"No '{self.permission(action)}' permission in catalog")

    def permission(self, action: str) -> str:
        return f"{self.domain}:{action}"


# ─── Row-level checks ───────────────────────────────────


def is_owner(actor: ActorContext, resource: Any, policy: OwnershipPolicy) -> bool:
    owner = getattr(resource, policy.owner_attr)
    return owner is not None and str(owner) == str(actor.user_id)


def is_shared(resource: Any, policy: OwnershipPolicy) -> bool:
    """Whether the row is visible to users other than its owner."""
    return all(
        str(getattr(resource, attr)) == value for attr, value in policy.shared_when
    )


def has_elevated_visibility(actor: ActorContext) -> bool:
    return actor.role in ELEVATED_VISIBILITY_ROLES


def can_read(actor: ActorContext, resource: Any, policy: OwnershipPolicy) -> bool:
    if actor.is_admin or is_owner(actor, resource, policy):
        return True
    return actor.has_permission(policy.permission("read")) and is_shared(resource, policy)


def can_update(actor: ActorContext, resource: Any, policy: OwnershipPolicy) -> bool:
    if actor.is_admin or is_owner(actor, resource, policy):
        return True
    return policy.allow_generic_update and is_allowed(actor, policy.permission("update"))


def can_delete(actor: ActorContext, resource: Any, policy: OwnershipPolicy) -> bool:
    if actor.is_admin or is_owner(actor, resource, policy):
        return True
    return policy.allow_generic_delete and is_allowed(actor, policy.permission("delete"))


_CHECKS = {"read": can_read, "update": can_update, "delete": can_delete}


def ensure_can(
    action: str, actor: ActorContext, resource: Any, policy: OwnershipPolicy
) -> None:
    """Raise Forbidden unless `actor` may perform `action` on `resource`."""
    if _CHECKS[action](actor, resource, policy):
        return
    logger.warning(
        "authz.ownership_denied",
        user_id=str(actor.user_id),
        role=actor.role,
        domain=policy.domain,
        action=action,
        resource_id=str(getattr(resource, "id", "")),
    )
    raise Forbidden("Access denied")


# ─── Query narrowing ────────────────────────────────────


def org_scope_clause(model: Any, actor: ActorContext, policy: OwnershipPolicy):
    """Confine to the actor's organization, or to their own rows if they have none."""
    if actor.organization_id is not None:
        return model.organization_id == actor.organization_id
    return getattr(model, policy.owner_attr) == actor.user_id


def visibility_clause(model: Any, actor: ActorContext, policy: OwnershipPolicy):
    """owner == actor OR (every shared_when attribute matches). None if unrestricted."""
    if not policy.shared_when or has_elevated_visibility(actor):
        return None
    shared = and_(*(getattr(model, attr) == value for attr, value in policy.shared_when))
    return or_(getattr(model, policy.owner_attr) == actor.user_id, shared)


def narrow_listing(
    stmt: Select, model: Any, actor: ActorContext, policy: OwnershipPolicy
) -> Select:
    """Apply organization scope and visibility narrowing to a SELECT."""
    if policy.org_scoped:
        stmt = stmt.where(org_scope_clause(model, actor, policy))
    clause = visibility_clause(model, actor, policy)
    if clause is not None:
        stmt = stmt.where(clause)
    return stmt


def scope_lookup(
    stmt: Select, model: Any, actor: ActorContext, policy: OwnershipPolicy
) -> Select:
    """Organization scope only — for single-row fetches that run ensure_can() after."""
    if policy.org_scoped:
        stmt = stmt.where(org_scope_clause(model, actor, policy))
    return stmt


# ─── Per-kind policies ──────────────────────────────────

POSTS = OwnershipPolicy(
    domain="posts",
    owner_attr="author_id",
    allow_generic_update=False,
    allow_generic_delete=False,
    shared_when=(("status", "published"), ("visibility", "public")),
    org_scoped=False,
)
LEADS = OwnershipPolicy(domain="crm", owner_attr="assigned_to")
PROJECTS = OwnershipPolicy(domain="projects", owner_attr="manager_id")
PROJECT_UPDATES = OwnershipPolicy(domain="projects", owner_attr="created_by")
MEETINGS = OwnershipPolicy(domain="hr", owner_attr="created_by")
INVOICES = OwnershipPolicy(domain="finance", owner_attr="created_by")

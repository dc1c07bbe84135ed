"""User, role and organization administration routes.

Learn: Every route here declares its permission with
require_permission(...) in the decorator's dependencies, and takes the
resolved ActorContext from get_current_actor (FastAPI caches it per
request, so the credential is only verified once).

Role and permission assignment refuses to touch the caller's own record.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.context import ActorContext
from bizdesk.auth.dependencies import get_current_actor, require_permission
from bizdesk.auth.permissions import ROLE_HIERARCHY, Permission, Role
from bizdesk.db.engine import get_db
from bizdesk.schemas.user import (
    OrgRead,
    OrgUpdate,
    PermissionsUpdate,
    RoleCatalog,
    RoleChange,
    UserRead,
    UserUpdate,
)
from bizdesk.services.user_service import DomainTaken, UserExists, UserInUse, UserService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


# ─── Users ──────────────────────────────────────────────

@router.get(
    "/users",
    response_model=list[UserRead],
    dependencies=[Depends(require_permission(Permission.USERS_READ))],
)
async def list_users(
    actor: ActorContext = Depends(get_current_actor),
    svc: UserService = Depends(_svc),
):
    return await svc.list_users(actor)


@router.get(
    "/users/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_permission(Permission.USERS_READ))],
)
async def get_user(
    user_id: uuid.UUID,
    actor: ActorContext = Depends(get_current_actor),
    svc: UserService = Depends(_svc),
):
    user = await svc.get_user(actor, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put(
    "/users/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_permission(Permission.USERS_UPDATE))],
)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    actor: ActorContext = Depends(get_current_actor),
    svc: UserService = Depends(_svc),
):
    """Partial update. Non-admins' role/active changes are ignored."""
    try:
        user = await svc.update_user(actor, user_id, body.model_dump(exclude_none=True))
    except UserExists:
        raise HTTPException(status_code=409, detail="Username or email already in use")
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.delete(
    "/users/{user_id}",
    dependencies=[Depends(require_permission(Permission.USERS_DELETE))],
)
async def delete_user(
    user_id: uuid.UUID,
    actor: ActorContext = Depends(get_current_actor),
    svc: UserService = Depends(_svc),
):
    try:
        deleted = await svc.delete_user(actor, user_id)
    except UserInUse:
        raise HTTPException(
            status_code=409, detail="User still owns records; deactivate instead"
        )
    if not deleted:
        raise HTTPException(status_code=404, detail="User not found")
    return {"deleted": True}


# ─── Roles + permissions ────────────────────────────────

@router.put(
    "/users/{user_id}/role",
    response_model=UserRead,
    dependencies=[Depends(require_permission(Permission.ROLES_ASSIGN))],
)
async def change_role(
    user_id: uuid.UUID,
    body: RoleChange,
    actor: ActorContext = Depends(get_current_actor),
    svc: UserService = Depends(_svc),
):
    """Change a user's role. Takes effect at their next token issuance."""
    user = await svc.change_role(actor, user_id, body.role)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put(
    "/users/{user_id}/permissions",
    response_model=UserRead,
    dependencies=[Depends(require_permission(Permission.ROLES_ASSIGN))],
)
async def set_permissions(
    user_id: uuid.UUID,
    body: PermissionsUpdate,
    actor: ActorContext = Depends(get_current_actor),
    svc: UserService = Depends(_svc),
):
    """Replace a user's permission set. Takes effect on their next request."""
    user = await svc.set_permissions(actor, user_id, body.permissions)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get(
    "/roles",
    response_model=RoleCatalog,
    dependencies=[Depends(require_permission(Permission.ROLES_READ))],
)
async def list_roles():
    return RoleCatalog(
        roles=[r.value for r in Role],
        permissions=[p.value for p in Permission],
        hierarchy={
            role.value: [r.value for r in below] for role, below in ROLE_HIERARCHY.items()
        },
    )


# ─── Organization ───────────────────────────────────────

@router.get(
    "/org",
    response_model=OrgRead,
    dependencies=[Depends(require_permission(Permission.ORG_READ))],
)
async def get_org(
    actor: ActorContext = Depends(get_current_actor),
    svc: UserService = Depends(_svc),
):
    org = await svc.get_organization(actor.organization_id)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org


@router.put(
    "/org",
    response_model=OrgRead,
    dependencies=[Depends(require_permission(Permission.ORG_MANAGE))],
)
async def update_org(
    body: OrgUpdate,
    actor: ActorContext = Depends(get_current_actor),
    svc: UserService = Depends(_svc),
):
    try:
        org = await svc.update_organization(actor, body.model_dump(exclude_none=True))
    except DomainTaken:
        raise HTTPException(status_code=409, detail="Domain already in use")
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org

"""Project and project-update routes.

Learn: Project updates (status notes) live under their project and
inherit its scope: if the project is invisible to the caller, so are
its updates (404). Adding an update needs projects:create; removing
one needs projects:update and is limited to its author, admins, or
holders of projects:delete.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.context import ActorContext
from bizdesk.auth.dependencies import get_current_actor, require_permission
from bizdesk.auth.permissions import Permission
from bizdesk.db.engine import get_db
from bizdesk.schemas.project import (
    ProjectCreate,
    ProjectNoteCreate,
    ProjectNoteRead,
    ProjectRead,
    ProjectUpdate,
)
from bizdesk.services.project_service import ProjectService
from bizdesk.services.scoped import ResourceInUse, UnknownMember

router = APIRouter(prefix="/projects")


def _svc(
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_current_actor),
) -> ProjectService:
    return ProjectService(db, actor)


# ─── Projects ───────────────────────────────────────────

@router.post(
    "",
    response_model=ProjectRead,
    status_code=201,
    dependencies=[Depends(require_permission(Permission.PROJECTS_CREATE))],
)
async def create_project(body: ProjectCreate, svc: ProjectService = Depends(_svc)):
    try:
        return await svc.create(body.model_dump())
    except UnknownMember as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get(
    "",
    response_model=list[ProjectRead],
    dependencies=[Depends(require_permission(Permission.PROJECTS_READ))],
)
async def list_projects(svc: ProjectService = Depends(_svc)):
    return await svc.list()


@router.get(
    "/{project_id}",
    response_model=ProjectRead,
    dependencies=[Depends(require_permission(Permission.PROJECTS_READ))],
)
async def get_project(project_id: uuid.UUID, svc: ProjectService = Depends(_svc)):
    project = await svc.get(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.put(
    "/{project_id}",
    response_model=ProjectRead,
    dependencies=[Depends(require_permission(Permission.PROJECTS_UPDATE))],
)
async def update_project(
    project_id: uuid.UUID,
    body: ProjectUpdate,
    svc: ProjectService = Depends(_svc),
):
    try:
        project = await svc.update(project_id, body.model_dump(exclude_none=True))
    except UnknownMember as e:
        raise HTTPException(status_code=422, detail=str(e))
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.delete(
    "/{project_id}",
    dependencies=[Depends(require_permission(Permission.PROJECTS_DELETE))],
)
async def delete_project(project_id: uuid.UUID, svc: ProjectService = Depends(_svc)):
    """Delete a project and its updates. Refused while meetings reference it."""
    try:
        deleted = await svc.delete(project_id)
    except ResourceInUse:
        raise HTTPException(status_code=409, detail="Project has meetings attached")
    if not deleted:
        raise HTTPException(status_code=404, detail="Project not found")
    return {"deleted": True}


# ─── Project updates ────────────────────────────────────

@router.get(
    "/{project_id}/updates",
    response_model=list[ProjectNoteRead],
    dependencies=[Depends(require_permission(Permission.PROJECTS_READ))],
)
async def list_project_updates(
    project_id: uuid.UUID,
    svc: ProjectService = Depends(_svc),
):
    updates = await svc.list_updates(project_id)
    if updates is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return updates


@router.post(
    "/{project_id}/updates",
    response_model=ProjectNoteRead,
    status_code=201,
    dependencies=[Depends(require_permission(Permission.PROJECTS_CREATE))],
)
async def add_project_update(
    project_id: uuid.UUID,
    body: ProjectNoteCreate,
    svc: ProjectService = Depends(_svc),
):
    update = await svc.add_update(project_id, title=body.title, content=body.content)
    if not update:
        raise HTTPException(status_code=404, detail="Project not found")
    return update


@router.delete(
    "/{project_id}/updates/{update_id}",
    dependencies=[Depends(require_permission(Permission.PROJECTS_UPDATE))],
)
async def delete_project_update(
    project_id: uuid.UUID,
    update_id: uuid.UUID,
    svc: ProjectService = Depends(_svc),
):
    if not await svc.delete_update(project_id, update_id):
        raise HTTPException(status_code=404, detail="Project update not found")
    return {"deleted": True}

"""CRM lead routes.

Learn: Leads are organization-scoped. A lead from another organization
is a 404 (it doesn't exist as far as the caller can tell), never a 403.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.context import ActorContext
from bizdesk.auth.dependencies import get_current_actor, require_permission
from bizdesk.auth.permissions import Permission
from bizdesk.db.engine import get_db
from bizdesk.schemas.crm import LeadCreate, LeadRead, LeadUpdate
from bizdesk.services.lead_service import LeadService
from bizdesk.services.scoped import UnknownMember

router = APIRouter(prefix="/crm")


def _svc(
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_current_actor),
) -> LeadService:
    return LeadService(db, actor)


@router.post(
    "/leads",
    response_model=LeadRead,
    status_code=201,
    dependencies=[Depends(require_permission(Permission.CRM_CREATE))],
)
async def create_lead(body: LeadCreate, svc: LeadService = Depends(_svc)):
    try:
        return await svc.create(body.model_dump())
    except UnknownMember as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get(
    "/leads",
    response_model=list[LeadRead],
    dependencies=[Depends(require_permission(Permission.CRM_READ))],
)
async def list_leads(svc: LeadService = Depends(_svc)):
    return await svc.list()


@router.get(
    "/leads/{lead_id}",
    response_model=LeadRead,
    dependencies=[Depends(require_permission(Permission.CRM_READ))],
)
async def get_lead(lead_id: uuid.UUID, svc: LeadService = Depends(_svc)):
    lead = await svc.get(lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


@router.put(
    "/leads/{lead_id}",
    response_model=LeadRead,
    dependencies=[Depends(require_permission(Permission.CRM_UPDATE))],
)
async def update_lead(
    lead_id: uuid.UUID,
    body: LeadUpdate,
    svc: LeadService = Depends(_svc),
):
    try:
        lead = await svc.update(lead_id, body.model_dump(exclude_none=True))
    except UnknownMember as e:
        raise HTTPException(status_code=422, detail=str(e))
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


@router.delete(
    "/leads/{lead_id}",
    dependencies=[Depends(require_permission(Permission.CRM_DELETE))],
)
async def delete_lead(lead_id: uuid.UUID, svc: LeadService = Depends(_svc)):
    if not await svc.delete(lead_id):
        raise HTTPException(status_code=404, detail="Lead not found")
    return {"deleted": True}

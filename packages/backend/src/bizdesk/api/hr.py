"""HR meeting routes."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.context import ActorContext
from bizdesk.auth.dependencies import get_current_actor, require_permission
from bizdesk.auth.permissions import Permission
from bizdesk.db.engine import get_db
from bizdesk.schemas.meeting import MeetingCreate, MeetingRead, MeetingUpdate
from bizdesk.services.meeting_service import MeetingService, ProjectNotFound

router = APIRouter(prefix="/hr")


def _svc(
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_current_actor),
) -> MeetingService:
    return MeetingService(db, actor)


@router.post(
    "/meetings",
    response_model=MeetingRead,
    status_code=201,
    dependencies=[Depends(require_permission(Permission.HR_CREATE))],
)
async def create_meeting(body: MeetingCreate, svc: MeetingService = Depends(_svc)):
    try:
        return await svc.create(body.model_dump())
    except ProjectNotFound:
        raise HTTPException(status_code=404, detail="Project not found")


@router.get(
    "/meetings",
    response_model=list[MeetingRead],
    dependencies=[Depends(require_permission(Permission.HR_READ))],
)
async def list_meetings(svc: MeetingService = Depends(_svc)):
    return await svc.list()


@router.get(
    "/meetings/{meeting_id}",
    response_model=MeetingRead,
    dependencies=[Depends(require_permission(Permission.HR_READ))],
)
async def get_meeting(meeting_id: uuid.UUID, svc: MeetingService = Depends(_svc)):
    meeting = await svc.get(meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return meeting


@router.put(
    "/meetings/{meeting_id}",
    response_model=MeetingRead,
    dependencies=[Depends(require_permission(Permission.HR_UPDATE))],
)
async def update_meeting(
    meeting_id: uuid.UUID,
    body: MeetingUpdate,
    svc: MeetingService = Depends(_svc),
):
    meeting = await svc.update(meeting_id, body.model_dump(exclude_none=True))
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return meeting


@router.delete(
    "/meetings/{meeting_id}",
    dependencies=[Depends(require_permission(Permission.HR_DELETE))],
)
async def delete_meeting(meeting_id: uuid.UUID, svc: MeetingService = Depends(_svc)):
    if not await svc.delete(meeting_id):
        raise HTTPException(status_code=404, detail="Meeting not found")
    return {"deleted": True}

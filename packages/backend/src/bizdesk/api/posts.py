"""Post routes.

Learn: Two checks guard every post route. The decorator's
require_permission() is the coarse gate ("may you touch posts at all?"),
the service's ownership filter is the fine one ("this post?"). A
private or draft post written by someone else is a 403 even when the
caller holds posts:read.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.context import ActorContext
from bizdesk.auth.dependencies import get_current_actor, require_permission
from bizdesk.auth.permissions import Permission
from bizdesk.db.engine import get_db
from bizdesk.schemas.post import PostCreate, PostRead, PostUpdate
from bizdesk.services.post_service import PostService

router = APIRouter(prefix="/posts")


def _svc(
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_current_actor),
) -> PostService:
    return PostService(db, actor)


@router.post(
    "",
    response_model=PostRead,
    status_code=201,
    dependencies=[Depends(require_permission(Permission.POSTS_CREATE))],
)
async def create_post(body: PostCreate, svc: PostService = Depends(_svc)):
    return await svc.create(body.model_dump())


@router.get(
    "",
    response_model=list[PostRead],
    dependencies=[Depends(require_permission(Permission.POSTS_READ))],
)
async def list_posts(svc: PostService = Depends(_svc)):
    """Own posts plus published public ones (admins see all)."""
    return await svc.list()


@router.get(
    "/{post_id}",
    response_model=PostRead,
    dependencies=[Depends(require_permission(Permission.POSTS_READ))],
)
async def get_post(post_id: uuid.UUID, svc: PostService = Depends(_svc)):
    post = await svc.get(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.put(
    "/{post_id}",
    response_model=PostRead,
    dependencies=[Depends(require_permission(Permission.POSTS_UPDATE))],
)
async def update_post(
    post_id: uuid.UUID,
    body: PostUpdate,
    svc: PostService = Depends(_svc),
):
    post = await svc.update(post_id, body.model_dump(exclude_none=True))
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.delete(
    "/{post_id}",
    dependencies=[Depends(require_permission(Permission.POSTS_DELETE))],
)
async def delete_post(post_id: uuid.UUID, svc: PostService = Depends(_svc)):
    if not await svc.delete(post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    return {"deleted": True}

"""Pydantic schemas for posts."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from bizdesk.db.models import PostStatus, Visibility


def _strip_not_blank(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class PostCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=300)
    content: str = Field(..., min_length=1)
    status: PostStatus = PostStatus.DRAFT
    visibility: Visibility = Visibility.PUBLIC
    tags: list[str] = Field(default_factory=list)

    not_blank = field_validator("title", "content")(_strip_not_blank)


class PostUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    title: Optional[str] = Field(None, min_length=3, max_length=300)
    content: Optional[str] = Field(None, min_length=1)
    status: Optional[PostStatus] = None
    visibility: Optional[Visibility] = None
    tags: Optional[list[str]] = None

    not_blank = field_validator("title", "content")(_strip_not_blank)


class PostRead(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    author_id: uuid.UUID
    status: str
    visibility: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

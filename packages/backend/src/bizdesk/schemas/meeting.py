"""Pydantic schemas for HR meetings."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from bizdesk.db.models import MeetingStatus, MeetingType

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class MeetingCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    project_id: uuid.UUID
    company_name: str = Field(..., min_length=1, max_length=200)
    meeting_date: date
    meeting_time: str = Field(..., pattern=_TIME_PATTERN)
    duration: int = Field(default=60, gt=0, le=24 * 60)
    attendees: list[str] = Field(default_factory=list)
    location: Optional[str] = Field(None, max_length=300)
    meeting_type: MeetingType = MeetingType.ONBOARDING
    status: MeetingStatus = MeetingStatus.SCHEDULED
    notes: Optional[str] = None


class MeetingUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    meeting_date: Optional[date] = None
    meeting_time: Optional[str] = Field(None, pattern=_TIME_PATTERN)
    duration: Optional[int] = Field(None, gt=0, le=24 * 60)
    attendees: Optional[list[str]] = None
    location: Optional[str] = Field(None, max_length=300)
    meeting_type: Optional[MeetingType] = None
    status: Optional[MeetingStatus] = None
    notes: Optional[str] = None


class MeetingRead(BaseModel):
    id: uuid.UUID
    organization_id: Optional[uuid.UUID]
    project_id: uuid.UUID
    title: str
    company_name: str
    meeting_date: date
    meeting_time: str
    duration: int
    attendees: list[str]
    location: Optional[str]
    meeting_type: str
    status: str
    notes: Optional[str]
    created_by: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}

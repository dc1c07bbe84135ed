"""Pydantic schemas for CRM leads."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from bizdesk.db.models import LeadSource, LeadStatus


class LeadCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=200)
    status: LeadStatus = LeadStatus.NEW
    source: LeadSource = LeadSource.OTHER
    value: float = Field(default=0, ge=0)
    notes: Optional[str] = None
    assigned_to: Optional[uuid.UUID] = None  # defaults to the creator


class LeadUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=200)
    status: Optional[LeadStatus] = None
    source: Optional[LeadSource] = None
    value: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    assigned_to: Optional[uuid.UUID] = None


class LeadRead(BaseModel):
    id: uuid.UUID
    organization_id: Optional[uuid.UUID]
    name: str
    email: str
    phone: Optional[str]
    company: Optional[str]
    status: str
    source: str
    value: float
    notes: Optional[str]
    assigned_to: Optional[uuid.UUID]
    created_at: datetime

    model_config = {"from_attributes": True}

"""Pydantic schemas for projects and project updates."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from bizdesk.db.models import Priority, ProjectStatus


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: Priority = Priority.MEDIUM
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[float] = Field(None, ge=0)
    progress: int = Field(default=0, ge=0, le=100)
    manager_id: Optional[uuid.UUID] = None  # defaults to the creator
    team: list[uuid.UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProjectUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[float] = Field(None, ge=0)
    progress: Optional[int] = Field(None, ge=0, le=100)
    manager_id: Optional[uuid.UUID] = None
    team: Optional[list[uuid.UUID]] = None


class ProjectRead(BaseModel):
    id: uuid.UUID
    organization_id: Optional[uuid.UUID]
    name: str
    description: Optional[str]
    status: str
    priority: str
    start_date: Optional[date]
    end_date: Optional[date]
    budget: Optional[float]
    progress: int
    manager_id: uuid.UUID
    team: list[uuid.UUID]
    created_at: datetime

    model_config = {"from_attributes": True}


# ─── Project updates ────────────────────────────────────

class ProjectNoteCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)


class ProjectNoteRead(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    organization_id: Optional[uuid.UUID]
    title: str
    content: str
    created_by: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}

"""Pydantic schemas for users, organizations, and role management.

Learn: Permission lists are typed as list[Permission] — pydantic rejects
anything outside the closed catalog with a 422 before it ever reaches
the service layer.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from bizdesk.auth.permissions import Permission, Role
from bizdesk.db.models import Module, SubscriptionPlan


# ─── Organizations ──────────────────────────────────────

class OrgRead(BaseModel):
    id: uuid.UUID
    name: str
    domain: Optional[str]
    modules: list[str]
    subscription_plan: str
    subscription_expires_at: Optional[datetime] = None
    active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class OrgUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    domain: Optional[str] = Field(None, max_length=255)
    modules: Optional[list[Module]] = None
    subscription_plan: Optional[SubscriptionPlan] = None


# ─── Users ──────────────────────────────────────────────

class UserRead(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    role: str
    permissions: list[str]
    organization_id: Optional[uuid.UUID]
    active: bool
    last_login_at: Optional[datetime] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Partial update. `role` and `active` are applied for admins only."""
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    role: Optional[Role] = None
    active: Optional[bool] = None


class RoleChange(BaseModel):
    role: Role


class PermissionsUpdate(BaseModel):
    permissions: list[Permission]


class RoleCatalog(BaseModel):
    """Roles, permissions and the (informational) role hierarchy."""
    roles: list[str]
    permissions: list[str]
    hierarchy: dict[str, list[str]]

"""Roles and the closed permission catalog.

Learn: Permissions are "<domain>:<action>" strings. The catalog is a
closed StrEnum — anything not listed here is rejected at the schema
layer (pydantic) and again at the ORM layer (User.permissions validator),
so an unknown string can never end up stored on an identity.

The role hierarchy below is descriptive metadata for the admin UI. It is
NOT consulted by authorize(): only the admin bypass and the identity's
explicit permission set decide access.
"""

from enum import StrEnum
from typing import Iterable


class Role(StrEnum):
    ADMIN = "admin"
    MANAGER = "manager"
    EDITOR = "editor"
    SUPERVISOR = "supervisor"
    EMPLOYEE = "employee"
    VIEWER = "viewer"


class Permission(StrEnum):
    # Organization
    ORG_MANAGE = "org:manage"
    ORG_READ = "org:read"
    # Users
    USERS_CREATE = "users:create"
    USERS_READ = "users:read"
    USERS_UPDATE = "users:update"
    USERS_DELETE = "users:delete"
    # Roles
    ROLES_ASSIGN = "roles:assign"
    ROLES_READ = "roles:read"
    # Posts
    POSTS_CREATE = "posts:create"
    POSTS_READ = "posts:read"
    POSTS_UPDATE = "posts:update"
    POSTS_DELETE = "posts:delete"
    # CRM
    CRM_CREATE = "crm:create"
    CRM_READ = "crm:read"
    CRM_UPDATE = "crm:update"
    CRM_DELETE = "crm:delete"
    # HR
    HR_CREATE = "hr:create"
    HR_READ = "hr:read"
    HR_UPDATE = "hr:update"
    HR_DELETE = "hr:delete"
    HR_APPROVE_LEAVE = "hr:approveLeave"
    # Inventory
    INVENTORY_CREATE = "inventory:create"
    INVENTORY_READ = "inventory:read"
    INVENTORY_UPDATE = "inventory:update"
    INVENTORY_DELETE = "inventory:delete"
    # Finance
    FINANCE_CREATE = "finance:create"
    FINANCE_READ = "finance:read"
    FINANCE_UPDATE = "finance:update"
    FINANCE_DELETE = "finance:delete"
    FINANCE_APPROVE = "finance:approve"
    FINANCE_EXPORT = "finance:export"
    # Projects
    PROJECTS_CREATE = "projects:create"
    PROJECTS_READ = "projects:read"
    PROJECTS_UPDATE = "projects:update"
    PROJECTS_DELETE = "projects:delete"
    PROJECTS_ASSIGN = "projects:assign"
    # Audit
    AUDIT_READ = "audit:read"
    AUDIT_CREATE = "audit:create"

    @property
    def domain(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(":", 1)[1]


ALL_PERMISSIONS: frozenset[str] = frozenset(p.value for p in Permission)

# Metadata only — see module docstring.
ROLE_HIERARCHY: dict[Role, tuple[Role, ...]] = {
    Role.ADMIN: (Role.MANAGER, Role.EDITOR, Role.SUPERVISOR, Role.EMPLOYEE, Role.VIEWER),
    Role.MANAGER: (Role.EDITOR, Role.SUPERVISOR, Role.EMPLOYEE, Role.VIEWER),
    Role.EDITOR: (Role.VIEWER,),
    Role.SUPERVISOR: (Role.EMPLOYEE, Role.VIEWER),
    Role.EMPLOYEE: (Role.VIEWER,),
    Role.VIEWER: (),
}

# Permissions granted to the first admin of a freshly registered organization.
REGISTRATION_PERMISSIONS: tuple[Permission, ...] = (
    Permission.ORG_MANAGE,
    Permission.CRM_CREATE,
    Permission.CRM_READ,
    Permission.CRM_UPDATE,
    Permission.CRM_DELETE,
    Permission.PROJECTS_CREATE,
    Permission.PROJECTS_READ,
    Permission.PROJECTS_UPDATE,
    Permission.PROJECTS_DELETE,
)

# Default permission sets used by the seeding CLI.
DEFAULT_ROLE_PERMISSIONS: dict[Role, tuple[Permission, ...]] = {
    Role.ADMIN: tuple(Permission),
    Role.MANAGER: (
        Permission.ORG_READ,
        Permission.CRM_CREATE,
        Permission.CRM_READ,
        Permission.CRM_UPDATE,
        Permission.PROJECTS_CREATE,
        Permission.PROJECTS_READ,
        Permission.PROJECTS_UPDATE,
        Permission.HR_READ,
        Permission.HR_UPDATE,
        Permission.INVENTORY_READ,
        Permission.INVENTORY_UPDATE,
        Permission.POSTS_CREATE,
        Permission.POSTS_READ,
        Permission.POSTS_UPDATE,
        Permission.POSTS_DELETE,
    ),
    Role.VIEWER: (
        Permission.ORG_READ,
        Permission.CRM_READ,
        Permission.PROJECTS_READ,
        Permission.HR_READ,
        Permission.INVENTORY_READ,
        Permission.FINANCE_READ,
        Permission.POSTS_READ,
    ),
}


class UnknownPermissionError(ValueError):
    """Raised when a permission string is not part of the catalog."""

    def __init__(self, unknown: Iterable[str]):
        self.unknown = sorted(set(unknown))
        super().__init__(f"Unknown permission(s): {', '.join(self.unknown)}")


def validate_permissions(values: Iterable[str]) -> list[str]:
    """Return the permissions as a de-duplicated list of catalog strings.

    Raises UnknownPermissionError if any value is outside the catalog.
    Order of first appearance is preserved.
    """
    values = [str(v) for v in values]
    unknown = [v for v in values if v not in ALL_PERMISSIONS]
    if unknown:
        raise UnknownPermissionError(unknown)
    return list(dict.fromkeys(values))


def implied_roles(role: Role) -> tuple[Role, ...]:
    """Roles listed beneath `role` in the hierarchy (metadata only)."""
    return ROLE_HIERARCHY.get(Role(role), ())

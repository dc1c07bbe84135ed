"""The resolved identity attached to an authenticated request."""

import uuid
from dataclasses import dataclass, field
from typing import Optional

from bizdesk.auth.permissions import Role


@dataclass(frozen=True)
class ActorContext:
    """Who is making the request and what they may do.

    Learn: Built by the authentication gate once per request. `role` is
    the snapshot embedded in the access token; `permissions` is read from
    the store on every request, so a revoked permission takes effect on
    the very next call.
    """

    user_id: uuid.UUID
    role: str
    permissions: frozenset[str] = field(default_factory=frozenset)
    organization_id: Optional[uuid.UUID] = None
    token_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def has_permission(self, permission: str) -> bool:
        """Exact, case-sensitive membership. No admin bypass here."""
        return str(permission) in self.permissions

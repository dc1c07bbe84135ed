"""Authorization gate — allow or deny one permission for one actor.

Learn: Deliberately flat. The only two inputs are the admin bypass and
the actor's explicit permission set:

    admin            → allow, permission set never inspected
    P in permissions → allow (exact string match, no wildcards/prefixes)
    otherwise        → Forbidden

The role hierarchy in permissions.py is not consulted. Nothing is cached:
the FastAPI dependency re-runs this for every request.
"""

from typing import Optional

import structlog

from bizdesk.auth.context import ActorContext
from bizdesk.auth.errors import Forbidden, Unauthenticated

logger = structlog.get_logger()


def is_allowed(actor: ActorContext, permission: str) -> bool:
    return actor.is_admin or actor.has_permission(permission)


def authorize(actor: Optional[ActorContext], permission: str) -> ActorContext:
    """Raise unless `actor` holds `permission`. Returns the actor."""
    if actor is None:
        raise Unauthenticated()
    if is_allowed(actor, permission):
        return actor

    # Audit hook: record the denial, never block on it.
    logger.warning(
        "authz.denied",
        user_id=str(actor.user_id),
        role=actor.role,
        permission=str(permission),
    )
    raise Forbidden()

"""Authorization gate tests — admin bypass and exact membership only."""

import uuid

import pytest

from bizdesk.auth.authorization import authorize, is_allowed
from bizdesk.auth.context import ActorContext
from bizdesk.auth.dependencies import require_permission
from bizdesk.auth.errors import Forbidden, Unauthenticated
from bizdesk.auth.permissions import Permission


def actor(role: str = "viewer", *permissions: str) -> ActorContext:
    return ActorContext(user_id=uuid.uuid4(), role=role, permissions=frozenset(permissions))


@pytest.mark.parametrize("permission", list(Permission))
def test_admin_with_empty_set_allowed_everything(permission):
    admin = actor("admin")
    assert authorize(admin, permission) is admin


def test_non_admin_allowed_with_exact_permission():
    viewer = actor("viewer", "crm:read")
    assert authorize(viewer, Permission.CRM_READ) is viewer


def test_non_admin_denied_without_permission():
    with pytest.raises(Forbidden) as exc:
        authorize(actor("viewer", "crm:read"), Permission.CRM_CREATE)
    assert exc.value.status_code == 403
    assert exc.value.message == "Insufficient permissions"


def test_role_grants_nothing_by_itself():
    # Manager outranks viewer in the hierarchy, but the hierarchy is never consulted.
    assert not is_allowed(actor("manager"), Permission.CRM_READ)


def test_no_wildcards_or_prefix_matching():
    holder = actor("manager", "crm:*", "crm", "CRM:READ")
    assert not is_allowed(holder, Permission.CRM_READ)


def test_missing_actor_is_unauthenticated():
    with pytest.raises(Unauthenticated):
        authorize(None, Permission.CRM_READ)


def test_require_permission_rejects_unknown_permission_at_declaration():
    with pytest.raises(ValueError):
        require_permission("crm:teleport")


def test_require_permission_names_its_checker():
    checker = require_permission(Permission.FINANCE_DELETE)
    assert checker.__name__ == "require_finance_delete"

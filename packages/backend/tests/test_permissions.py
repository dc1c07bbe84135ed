"""Permission catalog and role metadata tests."""

import pytest

from bizdesk.auth.permissions import (
    ALL_PERMISSIONS,
    DEFAULT_ROLE_PERMISSIONS,
    REGISTRATION_PERMISSIONS,
    ROLE_HIERARCHY,
    Permission,
    Role,
    UnknownPermissionError,
    implied_roles,
    validate_permissions,
)
from bizdesk.db.models import User


def test_catalog_entries_are_domain_action_pairs():
    for permission in Permission:
        domain, action = permission.value.split(":")
        assert permission.domain == domain
        assert permission.action == action


def test_catalog_covers_every_business_domain():
    domains = {p.domain for p in Permission}
    assert {"org", "users", "roles", "posts", "crm", "hr", "finance", "projects"} <= domains


def test_validate_permissions_dedups_in_order():
    assert validate_permissions(["crm:read", "hr:read", "crm:read"]) == ["crm:read", "hr:read"]


def test_validate_permissions_rejects_unknown():
    with pytest.raises(UnknownPermissionError) as exc:
        validate_permissions(["crm:read", "crm:*", "CRM:READ"])
    assert exc.value.unknown == ["CRM:READ", "crm:*"]


def test_default_sets_stay_inside_catalog():
    for permissions in DEFAULT_ROLE_PERMISSIONS.values():
        assert set(permissions) <= ALL_PERMISSIONS
    assert set(REGISTRATION_PERMISSIONS) <= ALL_PERMISSIONS


def test_hierarchy_is_metadata_only():
    assert Role.VIEWER in implied_roles(Role.ADMIN)
    assert implied_roles(Role.VIEWER) == ()
    assert set(ROLE_HIERARCHY) <= set(Role)


def test_user_model_rejects_unknown_permission():
    with pytest.raises(UnknownPermissionError):
        User(username="x", email="x@acme.com", password_hash="h", permissions=["crm:hack"])


def test_user_model_rejects_unknown_role():
    with pytest.raises(ValueError):
        User(username="x", email="x@acme.com", password_hash="h", role="superuser")


def test_user_model_normalizes_email():
    user = User(username="x", email="  Mixed@Acme.COM ", password_hash="h")
    assert user.email == "mixed@acme.com"

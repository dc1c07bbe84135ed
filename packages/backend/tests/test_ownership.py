"""Ownership filter tests — per-row checks and list narrowing."""

import uuid
from types import SimpleNamespace

import pytest

from bizdesk.auth.context import ActorContext
from bizdesk.auth.errors import Forbidden
from bizdesk.auth.ownership import (
    LEADS,
    POSTS,
    OwnershipPolicy,
    can_delete,
    can_read,
    can_update,
    ensure_can,
)
from bizdesk.db.models import Post
from bizdesk.services.post_service import PostService


def actor(role: str = "viewer", *permissions: str, org=None) -> ActorContext:
    return ActorContext(
        user_id=uuid.uuid4(),
        role=role,
        permissions=frozenset(permissions),
        organization_id=org,
    )


def post(author, status="published", visibility="public"):
    return SimpleNamespace(id=uuid.uuid4(), author_id=author, status=status, visibility=visibility)


# ─── Row-level checks ───────────────────────────────────


def test_owner_reads_own_private_draft():
    me = actor("editor")
    assert can_read(me, post(me.user_id, "draft", "private"), POSTS)


def test_private_post_unreadable_by_other_reader():
    reader = actor("editor", "posts:read")
    assert not can_read(reader, post(uuid.uuid4(), "published", "private"), POSTS)


def test_draft_unreadable_by_other_reader():
    reader = actor("editor", "posts:read")
    assert not can_read(reader, post(uuid.uuid4(), "draft", "public"), POSTS)


def test_published_public_post_readable_with_permission():
    reader = actor("viewer", "posts:read")
    assert can_read(reader, post(uuid.uuid4()), POSTS)


def test_admin_reads_any_post():
    assert can_read(actor("admin"), post(uuid.uuid4(), "draft", "private"), POSTS)


def test_post_update_is_author_only():
    editor = actor("editor", "posts:update", "posts:delete")
    other = post(uuid.uuid4())
    assert not can_update(editor, other, POSTS)
    assert not can_delete(editor, other, POSTS)
    assert can_update(editor, post(editor.user_id), POSTS)


def test_generic_update_allowed_where_policy_permits():
    manager = actor("manager", "crm:update")
    lead = SimpleNamespace(id=uuid.uuid4(), assigned_to=uuid.uuid4())
    assert can_update(manager, lead, LEADS)
    assert not can_delete(manager, lead, LEADS)


def test_ensure_can_raises_access_denied():
    reader = actor("viewer", "posts:read")
    with pytest.raises(Forbidden, match="Access denied"):
        ensure_can("read", reader, post(uuid.uuid4(), visibility="private"), POSTS)


def test_policy_refuses_domain_outside_catalog():
    with pytest.raises(ValueError):
        OwnershipPolicy(domain="spaceships", owner_attr="captain_id")


# ─── List narrowing (SQL) ───────────────────────────────


@pytest.mark.asyncio
async def test_listing_narrowed_in_query(db_session, make_user):
    author = await make_user("editor", ("posts:read",))
    reader = await make_user("viewer", ("posts:read",))
    db_session.add_all([
        Post(title="Public", content="x", author_id=author.id, status="published", visibility="public"),
        Post(title="Private", content="x", author_id=author.id, status="published", visibility="private"),
        Post(title="Draft", content="x", author_id=author.id, status="draft", visibility="public"),
        Post(title="Mine", content="x", author_id=reader.id, status="draft", visibility="private"),
    ])
    await db_session.commit()

    reader_ctx = ActorContext(user_id=reader.id, role="viewer", permissions=frozenset({"posts:read"}))
    titles = {p.title for p in await PostService(db_session, reader_ctx).list()}
    assert titles == {"Public", "Mine"}

    admin_ctx = ActorContext(user_id=uuid.uuid4(), role="admin")
    titles = {p.title for p in await PostService(db_session, admin_ctx).list()}
    assert titles == {"Public", "Private", "Draft", "Mine"}

"""Post API tests — author-only ownership on top of the permission gate."""

import pytest

AUTHOR_PERMS = ("posts:create", "posts:read", "posts:update", "posts:delete")


async def _create_post(client, headers, **overrides):
    body = {
        "title": "Quarterly plan",
        "content": "Numbers go up.",
        "status": "published",
        "visibility": "public",
    }
    body.update(overrides)
    r = await client.post("/api/v1/posts", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_create_post_stamps_author(client, make_user, auth_headers):
    author = await make_user("editor", AUTHOR_PERMS)
    post = await _create_post(client, auth_headers(author), author_id="ignored")
    assert post["author_id"] == str(author.id)
    assert post["status"] == "published"


@pytest.mark.asyncio
async def test_create_post_requires_permission(client, make_user, auth_headers):
    reader = await make_user("viewer", ("posts:read",))
    r = await client.post(
        "/api/v1/posts",
        json={"title": "Hello", "content": "World"},
        headers=auth_headers(reader),
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_blank_title_rejected(client, make_user, auth_headers):
    author = await make_user("editor", AUTHOR_PERMS)
    r = await client.post(
        "/api/v1/posts",
        json={"title": "     ", "content": "World"},
        headers=auth_headers(author),
    )
    assert r.status_code == 422
    assert r.json()["message"] == "Validation failed"


@pytest.mark.asyncio
async def test_update_rejects_blank_title_and_strips_padding(client, make_user, auth_headers):
    author = await make_user("editor", AUTHOR_PERMS)
    post = await _create_post(client, auth_headers(author))

    r = await client.put(
        f"/api/v1/posts/{post['id']}",
        json={"title": "   "},
        headers=auth_headers(author),
    )
    assert r.status_code == 422

    r = await client.put(
        f"/api/v1/posts/{post['id']}",
        json={"title": "  Revised plan  "},
        headers=auth_headers(author),
    )
    assert r.status_code == 200
    assert r.json()["title"] == "Revised plan"


@pytest.mark.asyncio
async def test_listing_shows_own_and_shared_posts(client, make_user, auth_headers):
    author = await make_user("editor", AUTHOR_PERMS)
    reader = await make_user("viewer", ("posts:read", "posts:create"))

    shared = await _create_post(client, auth_headers(author))
    await _create_post(client, auth_headers(author), visibility="private")
    await _create_post(client, auth_headers(author), status="draft")
    own_draft = await _create_post(client, auth_headers(reader), status="draft")

    r = await client.get("/api/v1/posts", headers=auth_headers(reader))
    assert r.status_code == 200
    assert {p["id"] for p in r.json()} == {shared["id"], own_draft["id"]}


@pytest.mark.asyncio
async def test_admin_lists_every_post(client, make_user, auth_headers):
    author = await make_user("editor", AUTHOR_PERMS)
    admin = await make_user("admin")
    await _create_post(client, auth_headers(author))
    await _create_post(client, auth_headers(author), visibility="private")
    await _create_post(client, auth_headers(author), status="draft")

    r = await client.get("/api/v1/posts", headers=auth_headers(admin))
    assert len(r.json()) == 3


@pytest.mark.asyncio
async def test_private_post_of_another_user_is_forbidden(client, make_user, auth_headers):
    author = await make_user("editor", AUTHOR_PERMS)
    reader = await make_user("viewer", ("posts:read",))
    private = await _create_post(client, auth_headers(author), visibility="private")

    r = await client.get(f"/api/v1/posts/{private['id']}", headers=auth_headers(reader))
    assert r.status_code == 403
    assert r.json() == {"success": False, "message": "Access denied"}

    r = await client.get(f"/api/v1/posts/{private['id']}", headers=auth_headers(author))
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_published_public_post_readable_by_others(client, make_user, auth_headers):
    author = await make_user("editor", AUTHOR_PERMS)
    reader = await make_user("viewer", ("posts:read",))
    post = await _create_post(client, auth_headers(author))

    r = await client.get(f"/api/v1/posts/{post['id']}", headers=auth_headers(reader))
    assert r.status_code == 200
    assert r.json()["title"] == "Quarterly plan"


@pytest.mark.asyncio
async def test_update_permission_is_not_enough_on_others_posts(
    client, make_user, auth_headers
):
    author = await make_user("editor", AUTHOR_PERMS)
    other_editor = await make_user("editor", AUTHOR_PERMS)
    post = await _create_post(client, auth_headers(author))

    r = await client.put(
        f"/api/v1/posts/{post['id']}",
        json={"title": "Hijacked"},
        headers=auth_headers(other_editor),
    )
    assert r.status_code == 403

    r = await client.delete(
        f"/api/v1/posts/{post['id']}", headers=auth_headers(other_editor)
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_author_updates_and_deletes_own_post(client, make_user, auth_headers):
    author = await make_user("editor", AUTHOR_PERMS)
    post = await _create_post(client, auth_headers(author))

    r = await client.put(
        f"/api/v1/posts/{post['id']}",
        json={"status": "archived", "tags": ["q3"]},
        headers=auth_headers(author),
    )
    assert r.status_code == 200
    assert r.json()["status"] == "archived"
    assert r.json()["tags"] == ["q3"]

    r = await client.delete(f"/api/v1/posts/{post['id']}", headers=auth_headers(author))
    assert r.status_code == 200
    r = await client.get(f"/api/v1/posts/{post['id']}", headers=auth_headers(author))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_admin_edits_any_post(client, make_user, auth_headers):
    author = await make_user("editor", AUTHOR_PERMS)
    admin = await make_user("admin")
    post = await _create_post(client, auth_headers(author), visibility="private")

    r = await client.put(
        f"/api/v1/posts/{post['id']}",
        json={"visibility": "public"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["visibility"] == "public"

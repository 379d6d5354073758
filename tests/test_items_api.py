"""Item API tests — ownership scoping.

Learn: Two users, alice and bob, each with their own token. Every
cross-user access must look exactly like access to an item that does
not exist: 404 with the same body, and no side effects.
"""

import uuid

import pytest
import pytest_asyncio
from sqlalchemy import select

from itemvault.db.models import Item


def _auth(user: dict) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}


@pytest_asyncio.fixture()
async def alice(signup):
    return await signup(username="alice")


@pytest_asyncio.fixture()
async def bob(signup):
    return await signup(username="bob")


async def _create(client, user, **fields):
    body = {"title": "an item", **fields}
    r = await client.post("/api/v1/items", json=body, headers=_auth(user))
    assert r.status_code == 201, r.text
    return r.json()


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_item(client, alice):
    item = await _create(client, alice, title="Write report", description="Q3")
    assert item["title"] == "Write report"
    assert item["description"] == "Q3"
    assert item["status"] == "pending"
    assert item["owner_id"] == alice["user"]["id"]


@pytest.mark.asyncio
async def test_create_ignores_injected_owner(client, alice, bob, db_session):
    item = await _create(client, alice, title="mine", owner_id=bob["user"]["id"])
    assert item["owner_id"] == alice["user"]["id"]

    stored = await db_session.get(Item, uuid.UUID(item["id"]))
    assert str(stored.owner_id) == alice["user"]["id"]


@pytest.mark.asyncio
async def test_create_requires_token(client, db_session):
    r = await client.post("/api/v1/items", json={"title": "orphan"})
    assert r.status_code == 401
    assert (await db_session.execute(select(Item))).first() is None


@pytest.mark.asyncio
async def test_create_with_invalid_token_touches_nothing(client, db_session):
    r = await client.post(
        "/api/v1/items",
        json={"title": "forged"},
        headers={"Authorization": "Bearer a.b.c"},
    )
    assert r.status_code == 401
    assert (await db_session.execute(select(Item))).first() is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [{}, {"title": ""}, {"title": "x" * 256}, {"title": "ok", "status": "archived"}],
)
async def test_create_validation(client, alice, body):
    r = await client.post("/api/v1/items", json=body, headers=_auth(alice))
    assert r.status_code == 422


# ═══════════════════════════════════════════════════════════
# Read
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_only_returns_own_items(client, alice, bob):
    a1 = await _create(client, alice, title="a1")
    a2 = await _create(client, alice, title="a2")
    b1 = await _create(client, bob, title="b1")

    r = await client.get("/api/v1/items", headers=_auth(alice))
    assert r.status_code == 200
    ids = [i["id"] for i in r.json()]
    assert set(ids) == {a1["id"], a2["id"]}
    assert b1["id"] not in ids
    # Newest first
    assert ids == [a2["id"], a1["id"]]

    r = await client.get("/api/v1/items", headers=_auth(bob))
    assert [i["id"] for i in r.json()] == [b1["id"]]


@pytest.mark.asyncio
async def test_list_filters_by_status(client, alice):
    await _create(client, alice, title="todo")
    done = await _create(client, alice, title="finished", status="done")

    r = await client.get("/api/v1/items", params={"status": "done"}, headers=_auth(alice))
    assert [i["id"] for i in r.json()] == [done["id"]]


@pytest.mark.asyncio
async def test_list_empty_for_new_user(client, alice):
    r = await client.get("/api/v1/items", headers=_auth(alice))
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.asyncio
async def test_get_own_item(client, alice):
    item = await _create(client, alice, title="mine")
    r = await client.get(f"/api/v1/items/{item['id']}", headers=_auth(alice))
    assert r.status_code == 200
    assert r.json()["title"] == "mine"


@pytest.mark.asyncio
async def test_get_other_users_item_is_not_found(client, alice, bob):
    item = await _create(client, bob, title="bob's")

    foreign = await client.get(f"/api/v1/items/{item['id']}", headers=_auth(alice))
    missing = await client.get(f"/api/v1/items/{uuid.uuid4()}", headers=_auth(alice))
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()


@pytest.mark.asyncio
async def test_get_with_malformed_id(client, alice):
    r = await client.get("/api/v1/items/not-a-uuid", headers=_auth(alice))
    assert r.status_code == 422


# ═══════════════════════════════════════════════════════════
# Update
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_partial_update(client, alice):
    item = await _create(client, alice, title="draft", description="keep me")
    r = await client.put(
        f"/api/v1/items/{item['id']}",
        json={"status": "in_progress"},
        headers=_auth(alice),
    )
    assert r.status_code == 200
    updated = r.json()
    assert updated["status"] == "in_progress"
    assert updated["title"] == "draft"
    assert updated["description"] == "keep me"
    assert updated["owner_id"] == alice["user"]["id"]


@pytest.mark.asyncio
async def test_update_cannot_reassign_owner(client, alice, bob):
    item = await _create(client, alice)
    r = await client.put(
        f"/api/v1/items/{item['id']}",
        json={"title": "renamed", "owner_id": bob["user"]["id"]},
        headers=_auth(alice),
    )
    assert r.status_code == 200
    assert r.json()["owner_id"] == alice["user"]["id"]
    assert r.json()["title"] == "renamed"


@pytest.mark.asyncio
async def test_update_other_users_item_is_not_found(client, alice, bob):
    item = await _create(client, bob, title="untouched")
    r = await client.put(
        f"/api/v1/items/{item['id']}",
        json={"title": "hijacked"},
        headers=_auth(alice),
    )
    assert r.status_code == 404

    r = await client.get(f"/api/v1/items/{item['id']}", headers=_auth(bob))
    assert r.json()["title"] == "untouched"


@pytest.mark.asyncio
async def test_update_missing_item(client, alice):
    r = await client.put(
        f"/api/v1/items/{uuid.uuid4()}", json={"title": "x"}, headers=_auth(alice)
    )
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_own_item(client, alice):
    item = await _create(client, alice)
    r = await client.delete(f"/api/v1/items/{item['id']}", headers=_auth(alice))
    assert r.status_code == 204

    r = await client.get(f"/api/v1/items/{item['id']}", headers=_auth(alice))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_other_users_item_is_not_found(client, alice, bob):
    item = await _create(client, bob)
    r = await client.delete(f"/api/v1/items/{item['id']}", headers=_auth(alice))
    assert r.status_code == 404

    r = await client.get(f"/api/v1/items/{item['id']}", headers=_auth(bob))
    assert r.status_code == 200


# ═══════════════════════════════════════════════════════════
# End to end
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_signup_login_create_and_isolation(client, codec):
    """Signup → login → create (owner injected) → stranger gets 404."""
    r = await client.post(
        "/api/v1/auth/signup",
        json={"email": "a@x.com", "username": "aaa", "password": "longenough1"},
    )
    assert r.status_code == 201
    signed_up = r.json()
    assert "password_hash" not in signed_up["user"]

    r = await client.post(
        "/api/v1/auth/login", json={"email": "a@x.com", "password": "longenough1"}
    )
    assert r.status_code == 200
    token = r.json()["token"]
    assert codec.verify(token).sub == signed_up["user"]["id"]

    stranger_id = str(uuid.uuid4())
    r = await client.post(
        "/api/v1/items",
        json={"title": "owned", "owner_id": stranger_id, "user_id": stranger_id},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == 201
    item = r.json()
    assert item["owner_id"] == signed_up["user"]["id"]

    r = await client.post(
        "/api/v1/auth/signup",
        json={"email": "b@x.com", "username": "bbb", "password": "longenough1"},
    )
    other_token = r.json()["token"]
    r = await client.get(
        f"/api/v1/items/{item['id']}",
        headers={"Authorization": f"Bearer {other_token}"},
    )
    assert r.status_code == 404

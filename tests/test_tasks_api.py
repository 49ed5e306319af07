"""Task API tests — CRUD, toggle, ownership isolation, auth gating.

Learn: These tests go through the real auth pipeline: every user is
registered over HTTP and every request carries that user's Bearer token.

Pattern: Build up test data using the API (register → tasks).
"""

import uuid

import pytest


# ═══════════════════════════════════════════════════════════
# Shared fixtures
# ═══════════════════════════════════════════════════════════


@pytest.fixture
async def ann(signup):
    return await signup("Ann", "ann@x.com", "secret1")


@pytest.fixture
async def bob(signup):
    return await signup("Bob", "bob@x.com", "secret2")


@pytest.fixture
async def ann_task(client, ann):
    _, headers = ann
    r = await client.post("/api/tasks", json={"title": "Ann's task"}, headers=headers)
    return r.json()


# ═══════════════════════════════════════════════════════════
# End-to-end scenario
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_full_lifecycle(client):
    """register → login → create → toggle → delete → empty list."""
    r = await client.post(
        "/api/register",
        json={"name": "Ann", "email": "ann@x.com", "password": "secret1"},
    )
    assert r.status_code == 201
    ann_id = r.json()["user"]["id"]

    r = await client.post(
        "/api/login", json={"email": "ann@x.com", "password": "secret1"}
    )
    assert r.status_code == 200
    headers = {"Authorization": f"Bearer {r.json()['token']}"}

    r = await client.post("/api/tasks", json={"title": "Write spec"}, headers=headers)
    assert r.status_code == 201
    task = r.json()
    assert task["title"] == "Write spec"
    assert task["description"] == ""
    assert task["status"] == "pending"
    assert task["owner"] == ann_id

    r = await client.patch(f"/api/tasks/{task['id']}/toggle", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "completed"

    r = await client.delete(f"/api/tasks/{task['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Task deleted successfully"}

    r = await client.get("/api/tasks", headers=headers)
    assert r.status_code == 200
    assert r.json() == []


# ═══════════════════════════════════════════════════════════
# Task CRUD
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_task_with_description(client, ann):
    _, headers = ann
    r = await client.post(
        "/api/tasks",
        json={"title": "Fix login bug", "description": "happens on Safari"},
        headers=headers,
    )
    assert r.status_code == 201
    task = r.json()
    assert task["description"] == "happens on Safari"
    assert set(task) == {
        "id", "title", "description", "status", "owner", "created_at", "updated_at",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"title": ""}, {"title": "   "}, {"description": "x"}])
async def test_create_task_requires_title(client, ann, body):
    _, headers = ann
    r = await client.post("/api/tasks", json=body, headers=headers)
    assert r.status_code == 400
    assert "message" in r.json()


@pytest.mark.asyncio
async def test_list_newest_first(client, ann):
    _, headers = ann
    for title in ("one", "two", "three"):
        await client.post("/api/tasks", json={"title": title}, headers=headers)

    r = await client.get("/api/tasks", headers=headers)
    assert [t["title"] for t in r.json()] == ["three", "two", "one"]


@pytest.mark.asyncio
async def test_update_task(client, ann, ann_task):
    _, headers = ann
    r = await client.put(
        f"/api/tasks/{ann_task['id']}",
        json={"description": "now with details", "status": "completed"},
        headers=headers,
    )
    assert r.status_code == 200
    task = r.json()
    assert task["title"] == "Ann's task"
    assert task["description"] == "now with details"
    assert task["status"] == "completed"


@pytest.mark.asyncio
async def test_update_rejects_bad_status(client, ann, ann_task):
    _, headers = ann
    r = await client.put(
        f"/api/tasks/{ann_task['id']}",
        json={"status": "in_progress"},
        headers=headers,
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_toggle_twice(client, ann, ann_task):
    _, headers = ann
    url = f"/api/tasks/{ann_task['id']}/toggle"
    assert (await client.patch(url, headers=headers)).json()["status"] == "completed"
    assert (await client.patch(url, headers=headers)).json()["status"] == "pending"


@pytest.mark.asyncio
async def test_delete_twice(client, ann, ann_task):
    _, headers = ann
    url = f"/api/tasks/{ann_task['id']}"
    assert (await client.delete(url, headers=headers)).status_code == 200
    r = await client.delete(url, headers=headers)
    assert r.status_code == 404
    assert r.json() == {"message": "Task not found or unauthorized"}


@pytest.mark.asyncio
async def test_unknown_and_malformed_ids_are_404(client, ann):
    _, headers = ann
    for task_id in (str(uuid.uuid4()), "not-a-uuid"):
        r = await client.patch(f"/api/tasks/{task_id}/toggle", headers=headers)
        assert r.status_code == 404
        r = await client.put(f"/api/tasks/{task_id}", json={"title": "x"}, headers=headers)
        assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Ownership isolation
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_other_user_sees_empty_list(client, ann_task, bob):
    _, bob_headers = bob
    r = await client.get("/api/tasks", headers=bob_headers)
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.asyncio
async def test_other_user_gets_404_on_every_write(client, ann, ann_task, bob):
    _, ann_headers = ann
    _, bob_headers = bob
    url = f"/api/tasks/{ann_task['id']}"

    r = await client.put(url, json={"title": "hijacked"}, headers=bob_headers)
    assert r.status_code == 404
    r = await client.patch(f"{url}/toggle", headers=bob_headers)
    assert r.status_code == 404
    r = await client.delete(url, headers=bob_headers)
    assert r.status_code == 404

    # Same body as a task that never existed
    missing = await client.delete(f"/api/tasks/{uuid.uuid4()}", headers=bob_headers)
    assert r.json() == missing.json()

    # Ann's task is untouched
    r = await client.get("/api/tasks", headers=ann_headers)
    [task] = r.json()
    assert task["title"] == "Ann's task"
    assert task["status"] == "pending"


@pytest.mark.asyncio
async def test_owner_cannot_be_set_by_client(client, ann, bob):
    """An 'owner' field in the body is ignored; the token decides."""
    ann_user, ann_headers = ann
    bob_user, _ = bob
    r = await client.post(
        "/api/tasks",
        json={"title": "sneaky", "owner": bob_user["id"], "owner_id": bob_user["id"]},
        headers=ann_headers,
    )
    assert r.status_code == 201
    assert r.json()["owner"] == ann_user["id"]


# ═══════════════════════════════════════════════════════════
# Auth gating
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/api/tasks"),
        ("POST", "/api/tasks"),
        ("PUT", f"/api/tasks/{uuid.uuid4()}"),
        ("PATCH", f"/api/tasks/{uuid.uuid4()}/toggle"),
        ("DELETE", f"/api/tasks/{uuid.uuid4()}"),
    ],
)
async def test_task_routes_require_token(client, method, path):
    r = await client.request(method, path, json={"title": "x"} if method in ("POST", "PUT") else None)
    assert r.status_code == 401

    r = await client.request(
        method, path, headers={"Authorization": "Bearer garbled.token.value"},
        json={"title": "x"} if method in ("POST", "PUT") else None,
    )
    assert r.status_code == 401

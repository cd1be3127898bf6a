"""
Tests for /api/systemmap.
"""

from conftest import auth, make_entry


def test_grant_list_revoke(client, ctx, admin):
    make_entry(ctx, "alice")

    response = client.post("/api/systemmap", params={"user": "alice"}, headers=auth(admin))
    assert response.status_code == 200
    assert response.json() == {"status": "success"}

    listed = client.get("/api/systemmap/list", params={"limit": 10}).json()
    assert listed["status"] == "success"
    assert [item["user"] for item in listed["payload"]] == ["root", "alice"]

    response = client.delete("/api/systemmap", params={"user": "alice"}, headers=auth(admin))
    assert response.json() == {"status": "success"}

    response = client.delete("/api/systemmap", params={"user": "alice"}, headers=auth(admin))
    assert response.status_code == 200
    assert response.json() == {"status": "failed", "payload": "Not found"}


def test_grant_is_idempotent(client, ctx, admin):
    make_entry(ctx, "alice")
    for _ in range(2):
        response = client.post("/api/systemmap", params={"user": "alice"}, headers=auth(admin))
        assert response.json() == {"status": "success"}

    count = client.get("/api/systemmap/list", params={"noexec": "true"}).json()
    assert count == {"status": "success", "payload": 2}


def test_grant_unknown_entry(client, admin):
    response = client.post("/api/systemmap", params={"user": "ghost"}, headers=auth(admin))
    assert response.json() == {"status": "failed", "payload": "Entry not found"}


def test_non_admin_is_denied(client, ctx, admin):
    make_entry(ctx, "alice")
    response = client.post("/api/systemmap", params={"user": "alice"}, headers=auth("alice"))
    assert response.json() == {"status": "failed", "payload": "Access denied"}

    response = client.delete("/api/systemmap", params={"user": admin}, headers=auth("alice"))
    assert response.json() == {"status": "failed", "payload": "Access denied"}


def test_anonymous_is_denied(client, admin):
    response = client.post("/api/systemmap", params={"user": admin})
    assert response.json() == {"status": "failed", "payload": "Access denied"}


def test_get(client, ctx, admin):
    make_entry(ctx, "alice")
    found = client.get("/api/systemmap", params={"user": admin}, headers=auth("alice")).json()
    assert found["status"] == "success"
    assert found["payload"]["user"] == admin

    missing = client.get("/api/systemmap", params={"user": "alice"}, headers=auth("alice")).json()
    assert missing == {"status": "failed", "payload": "Not found"}


def test_missing_user_parameter(client, admin):
    response = client.post("/api/systemmap", headers=auth(admin))
    assert response.json() == {"status": "failed", "payload": "Invalid query: user"}


def test_list_requires_limit(client, admin):
    assert client.get("/api/systemmap/list").json() == {"status": "failed", "payload": "Invalid request"}
    response = client.get("/api/systemmap/list", params={"limit": 51})
    assert response.json() == {"status": "failed", "payload": "Invalid request"}

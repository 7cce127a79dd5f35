import pytest


pytestmark = pytest.mark.asyncio


async def test_user_routes_require_admin(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)

    resp = await client.get("/api/v1/users", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"] == "Admin access required"

    assert (await client.get("/api/v1/users")).status_code == 401


async def test_admin_user_management_flow(client, admin_headers):
    create_resp = await client.post(
        "/api/v1/users",
        headers=admin_headers,
        json={"name": "Member One", "email": "member1@example.com", "password": "Member123"},
    )
    assert create_resp.status_code == 201
    user_id = create_resp.json()["data"]["user"]["id"]
    assert create_resp.json()["data"]["user"]["role"] == "user"

    list_resp = await client.get("/api/v1/users", headers=admin_headers, params={"search": "member1"})
    assert list_resp.status_code == 200
    users = list_resp.json()["data"]["users"]
    assert [u["email"] for u in users] == ["member1@example.com"]
    assert list_resp.json()["data"]["pagination"]["total"] == 1

    detail_resp = await client.get(f"/api/v1/users/{user_id}", headers=admin_headers)
    assert detail_resp.status_code == 200
    assert detail_resp.json()["data"]["user"]["name"] == "Member One"

    update_resp = await client.put(
        f"/api/v1/users/{user_id}",
        headers=admin_headers,
        json={"email": "member1+updated@example.com", "role": "admin"},
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["data"]["user"]["email"] == "member1+updated@example.com"
    assert update_resp.json()["data"]["user"]["role"] == "admin"

    toggle_resp = await client.patch(f"/api/v1/users/{user_id}/toggle-status", headers=admin_headers)
    assert toggle_resp.status_code == 200
    assert toggle_resp.json()["data"]["user"]["isActive"] is False
    assert toggle_resp.json()["message"] == "User deactivated successfully"

    delete_resp = await client.delete(f"/api/v1/users/{user_id}", headers=admin_headers)
    assert delete_resp.status_code == 200
    assert (await client.get(f"/api/v1/users/{user_id}", headers=admin_headers)).status_code == 404


async def test_list_filters_and_pagination(client, admin_headers, create_user):
    for _ in range(3):
        await create_user()
    inactive, _ = await create_user(is_active=False)

    resp = await client.get("/api/v1/users", headers=admin_headers, params={"role": "user", "limit": 2})
    data = resp.json()["data"]
    assert resp.status_code == 200
    assert len(data["users"]) == 2
    assert data["pagination"] == {
        "page": 1,
        "limit": 2,
        "total": 4,
        "totalPages": 2,
        "hasNext": True,
        "hasPrev": False,
    }

    resp = await client.get("/api/v1/users", headers=admin_headers, params={"isActive": "false"})
    assert [u["id"] for u in resp.json()["data"]["users"]] == [str(inactive.id)]

    resp = await client.get("/api/v1/users", headers=admin_headers, params={"limit": 500})
    assert resp.status_code == 400


async def test_admin_cannot_delete_or_deactivate_self(client, create_admin, auth_header_factory):
    admin, password = await create_admin()
    headers = await auth_header_factory(admin.email, password)

    delete_resp = await client.delete(f"/api/v1/users/{admin.id}", headers=headers)
    assert delete_resp.status_code == 403
    assert delete_resp.json()["error"] == "Cannot delete your own account"

    toggle_resp = await client.patch(f"/api/v1/users/{admin.id}/toggle-status", headers=headers)
    assert toggle_resp.status_code == 403
    assert toggle_resp.json()["error"] == "Cannot deactivate your own account"

    update_resp = await client.put(f"/api/v1/users/{admin.id}", headers=headers, json={"isActive": False})
    assert update_resp.status_code == 403


async def test_duplicate_email_conflict(client, admin_headers, create_user):
    existing, _ = await create_user()
    resp = await client.post(
        "/api/v1/users",
        headers=admin_headers,
        json={"name": "Copy Cat", "email": existing.email, "password": "Member123"},
    )
    assert resp.status_code == 409


async def test_user_stats(client, admin_headers, create_user):
    await create_user()
    await create_user(is_active=False)

    resp = await client.get("/api/v1/users/stats", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {
        "total": 3,
        "active": 2,
        "inactive": 1,
        "admins": 1,
        "regular": 2,
        "recentRegistrations": 3,
    }


async def test_unknown_user_is_404(client, admin_headers):
    resp = await client.get("/api/v1/users/00000000-0000-0000-0000-000000000000", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": "User not found"}

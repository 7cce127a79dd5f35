import uuid

import pytest

from app.core.security import create_access_token


pytestmark = pytest.mark.asyncio


async def register_user(client, name: str, email: str, password: str):
    return await client.post(
        "/api/v1/auth/register",
        json={"name": name, "email": email, "password": password},
    )


async def login_user(client, email: str, password: str):
    return await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password},
    )


async def test_register_and_login_flow(client):
    email = f"user_{uuid.uuid4().hex[:6]}@example.com"
    password = "StrongPass1"

    resp = await register_user(client, "New User", email, password)
    body = resp.json()
    assert resp.status_code == 201
    assert body["message"] == "User registered successfully"
    assert body["data"]["user"]["email"] == email
    assert body["data"]["user"]["role"] == "user"
    assert "password" not in body["data"]["user"]
    assert "passwordHash" not in body["data"]["user"]
    assert body["data"]["token"]

    # Same email with different case/whitespace is the same account
    dup_resp = await register_user(client, "Other", f"  {email.upper()} ", password)
    assert dup_resp.status_code == 409
    assert dup_resp.json() == {"error": "Email already registered"}

    login_resp = await login_user(client, email, password)
    login_body = login_resp.json()
    assert login_resp.status_code == 200
    assert login_body["message"] == "Login successful"
    assert login_body["data"]["user"]["lastLogin"] is not None

    bad_login = await login_user(client, email, "WrongPass1")
    assert bad_login.status_code == 401
    assert bad_login.json()["error"] == "Invalid email or password"

    unknown_login = await login_user(client, "nobody@example.com", password)
    assert unknown_login.status_code == 401
    assert unknown_login.json()["error"] == "Invalid email or password"


async def test_register_reports_every_invalid_field(client):
    resp = await register_user(client, "A", "not-an-email", "weak")
    body = resp.json()
    assert resp.status_code == 400
    assert body["error"] == "Validation failed"
    fields = {d["field"] for d in body["details"]}
    assert fields == {"name", "email", "password"}


async def test_inactive_user_cannot_login(client, create_user):
    user, password = await create_user(is_active=False)
    resp = await login_user(client, user.email, password)
    assert resp.status_code == 401
    assert resp.json()["error"] == "Account is deactivated"


async def test_profile_requires_token(client):
    resp = await client.get("/api/v1/auth/profile")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Access token required"

    resp = await client.get("/api/v1/auth/profile", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid token"


async def test_expired_token_rejected(client, create_user):
    user, _ = await create_user()
    token = create_access_token(str(user.id), user.role, expires_minutes=-1)
    resp = await client.get("/api/v1/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Token expired"


async def test_token_of_deleted_user_rejected(client):
    token = create_access_token(str(uuid.uuid4()), "admin")
    resp = await client.get("/api/v1/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "User not found"


async def test_profile_update_and_change_password(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)

    me_resp = await client.get("/api/v1/auth/profile", headers=headers)
    assert me_resp.status_code == 200
    assert me_resp.json()["data"]["user"]["id"] == str(user.id)

    update_resp = await client.put(
        "/api/v1/auth/profile",
        json={"name": "Renamed User"},
        headers=headers,
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["data"]["user"]["name"] == "Renamed User"
    assert update_resp.json()["data"]["user"]["email"] == user.email

    wrong_resp = await client.post(
        "/api/v1/auth/change-password",
        json={"currentPassword": "NotMine123", "newPassword": "NewPass456"},
        headers=headers,
    )
    assert wrong_resp.status_code == 400
    assert wrong_resp.json()["error"] == "Current password is incorrect"

    change_resp = await client.post(
        "/api/v1/auth/change-password",
        json={"currentPassword": password, "newPassword": "NewPass456"},
        headers=headers,
    )
    assert change_resp.status_code == 200
    assert change_resp.json()["message"] == "Password changed successfully"

    assert (await login_user(client, user.email, password)).status_code == 401
    assert (await login_user(client, user.email, "NewPass456")).status_code == 200


async def test_profile_email_conflict(client, create_user, auth_header_factory):
    user, password = await create_user()
    other, _ = await create_user()
    headers = await auth_header_factory(user.email, password)

    resp = await client.put("/api/v1/auth/profile", json={"email": other.email}, headers=headers)
    assert resp.status_code == 409


async def test_refresh_token(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)

    resp = await client.post("/api/v1/auth/refresh-token", headers=headers)
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]

    me_resp = await client.get("/api/v1/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert me_resp.status_code == 200


async def test_deactivated_user_token_stops_working(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)

    user.is_active = False
    await user.save()

    resp = await client.get("/api/v1/auth/profile", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["error"] == "Account is deactivated"

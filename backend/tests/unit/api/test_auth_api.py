"""
Unit Tests for Auth API Endpoints
Tests for: register, login, current user, profile linking
"""
import pytest
from httpx import AsyncClient
from faker import Faker

from app.core.security import decode_token

fake = Faker()


class TestRegister:

    async def test_register_success(self, client: AsyncClient):
        payload = {"email": fake.email(), "password": "secret123"}

        response = await client.post("/api/register", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["user"]["email"] == payload["email"].lower()
        assert data["user"]["role"] == "user"
        assert data["redirectUrl"] == "/test"
        assert data["token_type"] == "bearer"
        assert decode_token(data["access_token"])["sub"] == data["user"]["id"]

    async def test_register_admin_redirects_to_root(self, client: AsyncClient):
        payload = {"email": fake.email(), "password": "secret123", "role": "admin"}

        response = await client.post("/api/register", json=payload)

        assert response.status_code == 200
        assert response.json()["redirectUrl"] == "/"

    async def test_register_duplicate_email(self, client: AsyncClient, test_user):
        payload = {"email": test_user["email"].upper(), "password": "secret123"}

        response = await client.post("/api/register", json=payload)

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Email already registered"

    @pytest.mark.parametrize("payload", [
        {"email": "not-an-email", "password": "secret123"},
        {"email": "someone@example.com", "password": "123"},
        {"email": "someone@example.com"},
    ])
    async def test_register_invalid_input(self, client: AsyncClient, payload):
        response = await client.post("/api/register", json=payload)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestLogin:

    async def test_login_success(self, client: AsyncClient, test_user):
        response = await client.post(
            "/api/login",
            json={"email": test_user["email"], "password": test_user["password"]}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Login successful"
        assert data["user"]["id"] == test_user["id"]
        assert data["user"]["last_login"] is not None
        assert data["redirectUrl"] == "/test"
        assert data["access_token"]

    async def test_admin_login_redirect(self, client: AsyncClient, admin_user):
        response = await client.post(
            "/api/login",
            json={"email": admin_user["email"], "password": admin_user["password"]}
        )

        assert response.status_code == 200
        assert response.json()["redirectUrl"] == "/"

    async def test_login_wrong_password(self, client: AsyncClient, test_user):
        response = await client.post(
            "/api/login",
            json={"email": test_user["email"], "password": "wrongpassword"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post(
            "/api/login",
            json={"email": fake.email(), "password": "whatever"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    async def test_login_inactive_account(self, client: AsyncClient, inactive_user):
        response = await client.post(
            "/api/login",
            json={"email": inactive_user["email"], "password": inactive_user["password"]}
        )

        assert response.status_code == 403
        assert response.json()["code"] == "ACCOUNT_INACTIVE"


class TestCurrentUser:

    async def test_get_me(self, client: AsyncClient, test_user, auth_headers):
        response = await client.get("/api/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == test_user["id"]
        assert data["email"] == test_user["email"]
        assert data["role"] == "user"

    async def test_get_me_without_token(self, client: AsyncClient):
        response = await client.get("/api/me")

        assert response.status_code in (401, 403)
        assert response.json()["success"] is False

    async def test_get_me_with_bad_token(self, client: AsyncClient):
        response = await client.get("/api/me", headers={"Authorization": "Bearer nonsense"})

        assert response.status_code == 401


class TestLinkProfile:

    async def test_user_links_own_account(self, client: AsyncClient, test_user, auth_headers, make_profile):
        profile_id = await make_profile()

        response = await client.put(
            f"/api/users/{test_user['id']}/profile",
            json={"profileId": profile_id},
            headers=auth_headers,
        )

        assert response.status_code == 200
        me = await client.get("/api/me", headers=auth_headers)
        assert me.json()["profile_id"] == profile_id

    async def test_user_cannot_link_other_account(self, client: AsyncClient, admin_user, auth_headers, make_profile):
        profile_id = await make_profile()

        response = await client.put(
            f"/api/users/{admin_user['id']}/profile",
            json={"profileId": profile_id},
            headers=auth_headers,
        )

        assert response.status_code == 403

    async def test_admin_links_any_account(self, client: AsyncClient, test_user, admin_auth_headers, make_profile):
        profile_id = await make_profile()

        response = await client.put(
            f"/api/users/{test_user['id']}/profile",
            json={"profileId": profile_id},
            headers=admin_auth_headers,
        )

        assert response.status_code == 200

    async def test_link_unknown_profile(self, client: AsyncClient, test_user, auth_headers):
        response = await client.put(
            f"/api/users/{test_user['id']}/profile",
            json={"profileId": "missing"},
            headers=auth_headers,
        )

        assert response.status_code == 404

"""Tests for the admin login, refresh and profile endpoints."""

import pytest
from httpx import AsyncClient

from mendoza.models.user import User

pytestmark = pytest.mark.asyncio


class TestLogin:
    async def test_success(self, client: AsyncClient, admin_user: User):
        response = await client.post(
            "/api/v1/auth/login", json={"email": admin_user.email, "password": "testpass123"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["email"] == admin_user.email
        assert data["user"]["role"] == "admin"
        assert data["tokens"]["token_type"] == "bearer"
        assert "hashed_password" not in data["user"]

    async def test_wrong_password(self, client: AsyncClient, admin_user: User):
        response = await client.post("/api/v1/auth/login", json={"email": admin_user.email, "password": "nope"})
        assert response.status_code == 401

    async def test_unknown_email(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/login", json={"email": "nobody@example.com", "password": "testpass123"}
        )
        assert response.status_code == 401

    async def test_inactive_account(self, client: AsyncClient, inactive_admin: User):
        response = await client.post(
            "/api/v1/auth/login", json={"email": inactive_admin.email, "password": "testpass123"}
        )
        assert response.status_code == 403

    async def test_token_opens_admin_routes(self, client: AsyncClient, admin_user: User):
        login = await client.post("/api/v1/auth/login", json={"email": admin_user.email, "password": "testpass123"})
        token = login.json()["tokens"]["access_token"]

        response = await client.get("/api/v1/admin/apartments", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200


class TestRefresh:
    async def _login(self, client: AsyncClient, user: User) -> dict:
        response = await client.post("/api/v1/auth/login", json={"email": user.email, "password": "testpass123"})
        return response.json()["tokens"]

    async def test_refresh_returns_new_pair(self, client: AsyncClient, admin_user: User):
        tokens = await self._login(client, admin_user)

        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        assert response.status_code == 200
        assert set(response.json()) == {"access_token", "refresh_token", "token_type"}

    async def test_access_token_cannot_refresh(self, client: AsyncClient, admin_user: User):
        tokens = await self._login(client, admin_user)
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
        assert response.status_code == 401

    async def test_garbage_token(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": "garbage"})
        assert response.status_code == 401


class TestMe:
    async def test_profile(self, client: AsyncClient, admin_headers, admin_user: User):
        response = await client.get("/api/v1/auth/me", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["id"] == str(admin_user.id)

    async def test_requires_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code in (401, 403)

"""Tests for auth dependencies: get_current_user and get_current_admin edge cases."""

import uuid
from datetime import timedelta

from httpx import AsyncClient

from mendoza.auth.security import create_access_token, create_token_pair
from mendoza.models.user import User


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestGetCurrentUser:
    """Exercised through the /me endpoint."""

    async def test_valid_token(self, client: AsyncClient, admin_user: User):
        tokens = create_token_pair(str(admin_user.id))
        response = await client.get("/api/v1/auth/me", headers=_bearer(tokens["access_token"]))
        assert response.status_code == 200
        assert response.json()["email"] == admin_user.email

    async def test_expired_token_rejected(self, client: AsyncClient, admin_user: User):
        token = create_access_token(str(admin_user.id), expires_delta=timedelta(seconds=-1))
        response = await client.get("/api/v1/auth/me", headers=_bearer(token))
        assert response.status_code == 401

    async def test_invalid_token_format(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me", headers=_bearer("not.a.valid.jwt"))
        assert response.status_code == 401

    async def test_refresh_token_type_rejected(self, client: AsyncClient, admin_user: User):
        tokens = create_token_pair(str(admin_user.id))
        response = await client.get("/api/v1/auth/me", headers=_bearer(tokens["refresh_token"]))
        assert response.status_code == 401

    async def test_non_uuid_subject_rejected(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me", headers=_bearer(create_access_token("not-a-uuid")))
        assert response.status_code == 401

    async def test_nonexistent_user_rejected(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me", headers=_bearer(create_access_token(str(uuid.uuid4()))))
        assert response.status_code == 401

    async def test_inactive_user_rejected(self, client: AsyncClient, inactive_admin: User):
        token = create_access_token(str(inactive_admin.id))
        response = await client.get("/api/v1/auth/me", headers=_bearer(token))
        assert response.status_code == 401


class TestGetCurrentAdmin:
    async def test_admin_allowed(self, client: AsyncClient, admin_headers):
        response = await client.get("/api/v1/admin/bookings", headers=admin_headers)
        assert response.status_code == 200

    async def test_role_is_read_from_the_account_not_the_token(self, client: AsyncClient, viewer_user: User):
        # A token claiming admin does not promote a viewer account.
        token = create_access_token(str(viewer_user.id), role="admin")
        response = await client.get("/api/v1/admin/bookings", headers=_bearer(token))
        assert response.status_code == 403

"""Integration tests for request authentication and the 401/403 contract."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from rbac_service.core.security import create_access_token
from tests.helpers import bearer


pytestmark = pytest.mark.integration


class TestUnauthenticated:
    async def test_missing_token(self, client: AsyncClient, seeded):
        response = await client.get("/api/users")

        assert response.status_code == 401
        assert response.json() == {"message": "Unauthenticated."}
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_garbage_token(self, client: AsyncClient, seeded):
        response = await client.get("/api/users", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    async def test_expired_token(self, client: AsyncClient, seeded):
        token = create_access_token(seeded["Admin"], expires_delta=timedelta(minutes=-5))

        response = await client.get("/api/users", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    async def test_token_for_unknown_user(self, client: AsyncClient, seeded):
        response = await client.get("/api/users", headers=bearer(9999))

        assert response.status_code == 401

    async def test_account_requires_identity(self, client: AsyncClient, seeded):
        response = await client.get("/api/account")

        assert response.status_code == 401


class TestUnauthorized:
    async def test_body_names_missing_permission(self, client: AsyncClient, seeded):
        response = await client.delete("/api/users/1", headers=bearer(seeded["Manager"]))

        assert response.status_code == 403
        assert response.json() == {
            "message": "You do not have permission to perform this action.",
            "required_permission": "delete_users",
        }

    @pytest.mark.parametrize(
        "method, url",
        [
            ("POST", "/api/users"),
            ("PUT", "/api/users/1"),
            ("POST", "/api/roles"),
            ("DELETE", "/api/roles/1"),
            ("POST", "/api/permissions"),
            ("DELETE", "/api/permissions/1"),
        ],
    )
    async def test_viewer_cannot_write(self, client: AsyncClient, seeded, method, url):
        response = await client.request(method, url, headers=bearer(seeded["Viewer"]), json={})

        assert response.status_code == 403

    @pytest.mark.parametrize("url", ["/api/users", "/api/roles", "/api/permissions"])
    async def test_viewer_can_read(self, client: AsyncClient, seeded, url):
        response = await client.get(url, headers=bearer(seeded["Viewer"]))

        assert response.status_code == 200

    @pytest.mark.parametrize("url", ["/api/users", "/api/roles", "/api/permissions"])
    async def test_plain_user_cannot_read(self, client: AsyncClient, seeded, url):
        response = await client.get(url, headers=bearer(seeded["User"]))

        assert response.status_code == 403

    async def test_manager_cannot_sync_permissions(self, client: AsyncClient, seeded):
        response = await client.post(
            "/api/role/permissions",
            headers=bearer(seeded["Manager"]),
            json={"role_id": 2, "permissions": [4]},
        )

        assert response.status_code == 403
        assert response.json()["required_permission"] == "assign_permissions"


class TestAccount:
    async def test_returns_role_and_permissions(self, client: AsyncClient, seeded):
        response = await client.get("/api/account", headers=bearer(seeded["User"]))

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "user@example.com"
        assert body["role"]["name"] == "User"
        assert [p["name"] for p in body["role"]["permissions"]] == ["view_dashboard", "manage_account"]
        assert "password_hash" not in body


async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}

"""Unit tests for the authorization gate.

These tests verify:
- The allow/deny decision table (identity x role x permission held)
- Enum members and raw names are interchangeable
- Role changes made elsewhere are seen on the very next check
- enforce_permission raises the right domain error
"""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_service.core.exceptions import StoreFailure, Unauthenticated, Unauthorized
from rbac_service.rbac.catalog import PermissionName, permission_key
from rbac_service.rbac.gate import AuthorizationDecision, check_permission, enforce_permission
from rbac_service.services import role_permission_service, user_service


pytestmark = pytest.mark.unit


@pytest.fixture
async def roleless_user(db: AsyncSession):
    return await user_service.create_user(
        name="No Role",
        email="norole@example.com",
        password="password123",
        role_id=None,
        db=db,
    )


class TestDecisionTable:
    @pytest.mark.parametrize(
        "who, required, allowed",
        [
            ("anonymous", "edit_users", False),
            ("anonymous", "delete_users", False),
            ("roleless", "edit_users", False),
            ("roleless", "delete_users", False),
            ("manager", "edit_users", True),
            ("manager", "delete_users", False),
        ],
    )
    async def test_decision(self, db: AsyncSession, manager_user, roleless_user, who, required, allowed):
        user = {"anonymous": None, "roleless": roleless_user, "manager": manager_user}[who]

        decision = await check_permission(user, required, db)

        assert decision.allowed is allowed
        assert decision.authenticated is (user is not None)
        assert decision.required_permission == required

    async def test_missing_permission_reported_on_deny(self, db: AsyncSession, manager_user):
        decision = await check_permission(manager_user, PermissionName.DELETE_USERS, db)

        assert decision.missing_permission == "delete_users"

    async def test_no_missing_permission_when_unauthenticated(self, db: AsyncSession):
        decision = await check_permission(None, PermissionName.DELETE_USERS, db)

        assert decision.missing_permission is None

    async def test_no_missing_permission_on_allow(self, db: AsyncSession, manager_user):
        decision = await check_permission(manager_user, PermissionName.VIEW_USERS, db)

        assert decision == AuthorizationDecision(
            allowed=True, authenticated=True, required_permission="view_users"
        )
        assert decision.missing_permission is None


class TestPermissionNames:
    async def test_enum_and_string_agree(self, db: AsyncSession, manager_user):
        by_enum = await check_permission(manager_user, PermissionName.EDIT_USERS, db)
        by_name = await check_permission(manager_user, "edit_users", db)

        assert by_enum == by_name

    async def test_names_are_case_sensitive(self, db: AsyncSession, manager_user):
        decision = await check_permission(manager_user, "Edit_Users", db)

        assert decision.allowed is False

    async def test_unknown_permission_denies(self, db: AsyncSession, manager_user):
        decision = await check_permission(manager_user, "launch_rockets", db)

        assert decision.allowed is False

    def test_permission_key(self):
        assert permission_key(PermissionName.ASSIGN_PERMISSIONS) == "assign_permissions"
        assert permission_key("custom_thing") == "custom_thing"
        assert str(PermissionName.VIEW_DASHBOARD) == "view_dashboard"


class TestFreshness:
    async def test_revoke_in_another_session_is_seen_immediately(
        self, db: AsyncSession, session_factory, catalog, manager_user
    ):
        await db.commit()
        assert (await check_permission(manager_user, "edit_users", db)).allowed is True

        async with session_factory() as other:
            await role_permission_service.revoke_permissions(
                manager_user.role_id, [catalog["edit_users"].id], other
            )
            await other.commit()

        assert (await check_permission(manager_user, "edit_users", db)).allowed is False
        assert (await check_permission(manager_user, "view_users", db)).allowed is True

    async def test_role_change_is_seen_immediately(self, db: AsyncSession, manager_user):
        await user_service.update_user(manager_user.id, db, clear_role=True)

        assert (await check_permission(manager_user, "view_users", db)).allowed is False

    async def test_revoke_then_assign_restores_access(self, db: AsyncSession, catalog, manager_user):
        edit = catalog["edit_users"].id

        await role_permission_service.revoke_permissions(manager_user.role_id, [edit], db)
        assert (await check_permission(manager_user, "edit_users", db)).allowed is False

        await role_permission_service.assign_permissions(manager_user.role_id, [edit], db)
        assert (await check_permission(manager_user, "edit_users", db)).allowed is True


class TestEnforcePermission:
    async def test_returns_user_on_allow(self, db: AsyncSession, manager_user):
        assert await enforce_permission(manager_user, PermissionName.EDIT_USERS, db) is manager_user

    async def test_anonymous_raises_unauthenticated(self, db: AsyncSession):
        with pytest.raises(Unauthenticated):
            await enforce_permission(None, PermissionName.VIEW_USERS, db)

    async def test_missing_permission_raises_unauthorized(self, db: AsyncSession, manager_user):
        with pytest.raises(Unauthorized) as exc_info:
            await enforce_permission(manager_user, PermissionName.DELETE_USERS, db)

        assert exc_info.value.required_permission == "delete_users"
        assert exc_info.value.to_dict() == {
            "message": "You do not have permission to perform this action.",
            "required_permission": "delete_users",
        }

    async def test_roleless_user_raises_unauthorized(self, db: AsyncSession, roleless_user):
        with pytest.raises(Unauthorized):
            await enforce_permission(roleless_user, PermissionName.VIEW_DASHBOARD, db)


class TestStoreFailure:
    async def test_store_error_becomes_store_failure(self, db: AsyncSession, manager_user, monkeypatch):
        async def broken_execute(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is gone"))

        monkeypatch.setattr(AsyncSession, "execute", broken_execute)

        with pytest.raises(StoreFailure) as exc_info:
            await check_permission(manager_user, PermissionName.VIEW_USERS, db)

        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert exc_info.value.to_dict() == {"message": "Service temporarily unavailable."}

    async def test_anonymous_check_never_touches_store(self, db: AsyncSession, monkeypatch):
        async def broken_execute(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is gone"))

        monkeypatch.setattr(AsyncSession, "execute", broken_execute)

        decision = await check_permission(None, PermissionName.VIEW_USERS, db)

        assert decision.authenticated is False

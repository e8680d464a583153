"""
Authorization gate — turns (user, required permission) into allow/deny.

The decision is made against the store on EVERY call: the user's
current `role_id` and that role's permission names are read in one
query, never from objects already sitting in the session.  A role
mutated by the sync engine one request ago is therefore observed
immediately, and there is no cache to invalidate.

Decision table:
    no user                         → deny, unauthenticated (401)
    user without a role             → deny, missing = required (403)
    role lacks the permission name  → deny, missing = required (403)
    role holds the permission name  → allow
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_service.core.exceptions import StoreFailure, Unauthenticated, Unauthorized
from rbac_service.models.permission import Permission
from rbac_service.models.role import role_permissions
from rbac_service.models.user import User
from rbac_service.rbac.catalog import PermissionName, permission_key

logger = logging.getLogger("rbac")


@dataclass(frozen=True)
class AuthorizationDecision:
    """Outcome of one gate check.  Never persisted."""

    allowed: bool
    authenticated: bool
    required_permission: str

    @property
    def missing_permission(self) -> str | None:
        if self.allowed or not self.authenticated:
            return None
        return self.required_permission


async def _role_grants(user_id: int, permission_name: str, db: AsyncSession) -> bool:
    """True when the user's current role holds `permission_name`."""
    stmt = (
        select(Permission.id)
        .join(role_permissions, role_permissions.c.permission_id == Permission.id)
        .join(User, User.role_id == role_permissions.c.role_id)
        .where(User.id == user_id, Permission.name == permission_name)
        .limit(1)
    )
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as exc:
        raise StoreFailure() from exc
    return result.scalar_one_or_none() is not None


async def check_permission(
    user: User | None,
    required_permission: PermissionName | str,
    db: AsyncSession,
) -> AuthorizationDecision:
    """Evaluate the gate without raising.  Side-effect free."""
    required = permission_key(required_permission)

    if user is None:
        return AuthorizationDecision(allowed=False, authenticated=False, required_permission=required)

    # The join on users.role_id covers the "no role" case: no row, deny.
    allowed = await _role_grants(user.id, required, db)
    return AuthorizationDecision(allowed=allowed, authenticated=True, required_permission=required)


async def enforce_permission(
    user: User | None,
    required_permission: PermissionName | str,
    db: AsyncSession,
) -> User:
    """Raising form of `check_permission`.  Returns the user on allow."""
    decision = await check_permission(user, required_permission, db)

    if not decision.authenticated:
        raise Unauthenticated()

    if not decision.allowed:
        logger.warning(
            "Permission denied for user %s — required: %s",
            user.id,
            decision.required_permission,
        )
        raise Unauthorized(decision.required_permission)

    return user

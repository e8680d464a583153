"""
RBAC dependencies — where routes meet the authorization gate.

`require_permission` is a *dependency factory*:  call it with the
permission a route needs and it returns a FastAPI dependency that will:

1. Resolve the bearer token to a user id (via `get_token_user_id`).
2. Load that user (None when the token is missing, invalid, or names a
   user that no longer exists).
3. Ask the gate, which re-reads the user's role → permissions.
4. Raise `Unauthenticated` (401) or `Unauthorized` (403, carrying the
   missing permission name) on deny.

Usage in a route:
    @router.get("/users", dependencies=[Depends(require_permission(PermissionName.VIEW_USERS))])
    async def list_users(...): ...

Or inject the user object:
    @router.get("/roles")
    async def list_roles(user: User = Depends(require_permission(PermissionName.VIEW_ROLES))): ...
"""

import logging

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_service.core.database import get_db
from rbac_service.core.exceptions import Unauthenticated
from rbac_service.core.security import get_token_user_id
from rbac_service.models.user import User
from rbac_service.rbac.catalog import PermissionName, permission_key
from rbac_service.rbac.gate import enforce_permission

logger = logging.getLogger("rbac")


async def get_current_user_optional(
    user_id: int | None = Depends(get_token_user_id),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """The authenticated user, or None.  Never raises for missing identity."""
    if user_id is None:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        logger.info("Bearer token references unknown user %s", user_id)
    return user


class require_permission:
    """
    Dependency factory.

    Can be used as:
        Depends(require_permission(PermissionName.EDIT_USERS))
        Depends(require_permission("edit_users"))
    """

    def __init__(self, permission: PermissionName | str):
        self.permission = permission_key(permission)

    async def __call__(
        self,
        user: User | None = Depends(get_current_user_optional),
        db: AsyncSession = Depends(get_db),
    ) -> User:
        return await enforce_permission(user, self.permission, db)


async def get_current_active_user(
    user: User | None = Depends(get_current_user_optional),
) -> User:
    """Dependency that returns the current user WITHOUT permission checks.
    Useful for routes that only need authentication, not authorization."""
    if user is None:
        raise Unauthenticated()
    return user

"""
Permission registry — CRUD over the capability tokens.

Names are unique across every guard.  Deleting a permission strips it
from every role in the same transaction, so no role is ever observed
holding a permission that no longer exists.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_service.core.config import settings
from rbac_service.core.exceptions import DuplicateName, NotFound, ValidationFailed
from rbac_service.models.permission import Permission
from rbac_service.models.role import role_permissions

logger = logging.getLogger(__name__)


async def _ensure_name_free(
    name: str,
    db: AsyncSession,
    exclude_id: int | None = None,
) -> None:
    stmt = select(Permission.id).where(Permission.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Permission.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise DuplicateName("permission", name)


def _checked_guard(guard_name: str) -> str:
    if not guard_name:
        raise ValidationFailed("guard_name", "The guard name must not be empty.")
    return guard_name


async def _flush_or_duplicate(name: str, db: AsyncSession) -> None:
    # A concurrent writer can still win the race between check and insert.
    try:
        await db.flush()
    except IntegrityError as exc:
        raise DuplicateName("permission", name) from exc


async def create_permission(
    name: str,
    db: AsyncSession,
    guard_name: str | None = None,
) -> Permission:
    await _ensure_name_free(name, db)

    permission = Permission(
        name=name,
        guard_name=(
            settings.DEFAULT_GUARD_NAME if guard_name is None else _checked_guard(guard_name)
        ),
    )
    db.add(permission)
    await _flush_or_duplicate(name, db)

    logger.info("Created permission %s (guard=%s)", name, permission.guard_name)
    return permission


async def get_permission(permission_id: int, db: AsyncSession) -> Permission:
    stmt = select(Permission).where(Permission.id == permission_id)
    result = await db.execute(stmt)
    permission = result.scalar_one_or_none()
    if permission is None:
        raise NotFound("permission", permission_id)
    return permission


async def list_permissions(db: AsyncSession) -> list[Permission]:
    """All permissions in creation (id) order."""
    result = await db.execute(select(Permission).order_by(Permission.id))
    return list(result.scalars().all())


async def update_permission(
    permission_id: int,
    name: str,
    db: AsyncSession,
    guard_name: str | None = None,
) -> Permission:
    """Rename a permission.  Omitting `guard_name` keeps the current one."""
    permission = await get_permission(permission_id, db)
    if guard_name is not None:
        _checked_guard(guard_name)
    await _ensure_name_free(name, db, exclude_id=permission.id)

    permission.name = name
    if guard_name is not None:
        permission.guard_name = guard_name
    await _flush_or_duplicate(name, db)
    return permission


async def delete_permission(permission_id: int, db: AsyncSession) -> None:
    """Delete a permission and detach it from every role, atomically."""
    permission = await get_permission(permission_id, db)

    detached = await db.execute(
        delete(role_permissions).where(role_permissions.c.permission_id == permission.id)
    )
    await db.delete(permission)
    await db.flush()

    logger.info(
        "Deleted permission %s (detached from %s role(s))",
        permission.name,
        detached.rowcount,
    )

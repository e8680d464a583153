"""
Role store — CRUD over named roles.

Roles are created with an empty permission set; the set itself is
owned by `role_permission_service`.

Delete policy: a role still referenced by any user is NOT deleted —
`InUse` is raised and the caller must reassign those users first.
Every read re-populates objects already in the session so callers
always see the store's current permission sets.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rbac_service.core.exceptions import DuplicateName, InUse, NotFound
from rbac_service.models.role import Role
from rbac_service.models.user import User

logger = logging.getLogger(__name__)


def _role_query(include_permissions: bool, include_users: bool):
    stmt = select(Role).execution_options(populate_existing=True)
    if include_permissions:
        stmt = stmt.options(selectinload(Role.permissions))
    if include_users:
        stmt = stmt.options(selectinload(Role.users))
    return stmt


async def _ensure_name_free(
    name: str,
    db: AsyncSession,
    exclude_id: int | None = None,
) -> None:
    stmt = select(Role.id).where(Role.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Role.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise DuplicateName("role", name)


async def create_role(name: str, db: AsyncSession) -> Role:
    await _ensure_name_free(name, db)

    role = Role(name=name, permissions=[], users=[])
    db.add(role)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise DuplicateName("role", name) from exc

    logger.info("Created role %s", name)
    return role


async def get_role(
    role_id: int,
    db: AsyncSession,
    include_permissions: bool = True,
    include_users: bool = True,
) -> Role:
    stmt = _role_query(include_permissions, include_users).where(Role.id == role_id)
    result = await db.execute(stmt)
    role = result.scalar_one_or_none()
    if role is None:
        raise NotFound("role", role_id)
    return role


async def list_roles(
    db: AsyncSession,
    include_permissions: bool = True,
    include_users: bool = True,
) -> list[Role]:
    """All roles in creation (id) order."""
    stmt = _role_query(include_permissions, include_users).order_by(Role.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def update_role(role_id: int, name: str, db: AsyncSession) -> Role:
    role = await get_role(role_id, db)
    await _ensure_name_free(name, db, exclude_id=role.id)

    role.name = name
    try:
        await db.flush()
    except IntegrityError as exc:
        raise DuplicateName("role", name) from exc
    return role


async def count_role_users(role_id: int, db: AsyncSession) -> int:
    stmt = select(func.count()).select_from(User).where(User.role_id == role_id)
    return (await db.execute(stmt)).scalar_one()


async def delete_role(role_id: int, db: AsyncSession) -> None:
    """Delete an unreferenced role.  Raises `InUse` otherwise."""
    role = await get_role(role_id, db, include_users=False)

    user_count = await count_role_users(role.id, db)
    if user_count:
        raise InUse(role.id, user_count)

    # The loaded `permissions` collection makes the ORM clear the
    # role_permissions rows along with the role.
    await db.delete(role)
    await db.flush()
    logger.info("Deleted role %s", role.name)

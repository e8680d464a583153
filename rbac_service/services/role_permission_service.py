"""
Role ↔ permission sync engine.

The only code path that mutates a role's permission set:

- `assign_permissions`  — union; ids already held are left alone.
- `revoke_permissions`  — difference; ids not currently held are no-ops.
- `replace_permissions` — the set becomes exactly the given ids.

Strictness is uniform: an unknown role id or ANY permission id missing
from the registry raises `NotFound`, and the whole call is validated
before anything is touched, so a failed call leaves the set as it was.

Atomicity comes from the request transaction plus a row lock on the
role (`SELECT … FOR UPDATE`), which serializes concurrent syncs on the
same role.  Readers see the old set until commit, then the new one.
"""

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rbac_service.core.exceptions import NotFound, StoreFailure
from rbac_service.models.permission import Permission
from rbac_service.models.role import Role
from rbac_service.services import role_service

logger = logging.getLogger(__name__)


def _unique(ids: Sequence[int]) -> list[int]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


async def _lock_role(role_id: int, db: AsyncSession) -> Role:
    stmt = (
        select(Role)
        .where(Role.id == role_id)
        .options(selectinload(Role.permissions))
        .with_for_update(of=Role)
        .execution_options(populate_existing=True)
    )
    role = (await db.execute(stmt)).scalar_one_or_none()
    if role is None:
        raise NotFound("role", role_id)
    return role


async def _resolve_permissions(permission_ids: Sequence[int], db: AsyncSession) -> list[Permission]:
    """Load every requested permission, or raise for the first unknown id."""
    ids = _unique(permission_ids)
    if not ids:
        return []

    result = await db.execute(select(Permission).where(Permission.id.in_(ids)))
    by_id = {perm.id: perm for perm in result.scalars().all()}

    for permission_id in ids:
        if permission_id not in by_id:
            raise NotFound("permission", permission_id)
    return [by_id[permission_id] for permission_id in ids]


async def _refreshed(role: Role, db: AsyncSession) -> Role:
    await db.flush()
    return await role_service.get_role(role.id, db, include_users=False)


async def assign_permissions(
    role_id: int,
    permission_ids: Sequence[int],
    db: AsyncSession,
) -> Role:
    """Add permissions to a role without detaching the ones it holds."""
    try:
        role = await _lock_role(role_id, db)
        permissions = await _resolve_permissions(permission_ids, db)

        held = {perm.id for perm in role.permissions}
        added = [perm for perm in permissions if perm.id not in held]
        role.permissions.extend(added)

        role = await _refreshed(role, db)
    except SQLAlchemyError as exc:
        raise StoreFailure() from exc

    logger.info("Assigned %d new permission(s) to role %s", len(added), role.name)
    return role


async def revoke_permissions(
    role_id: int,
    permission_ids: Sequence[int],
    db: AsyncSession,
) -> Role:
    """Detach permissions from a role.  Unassigned ids are ignored."""
    try:
        role = await _lock_role(role_id, db)
        permissions = await _resolve_permissions(permission_ids, db)

        revoked = {perm.id for perm in permissions}
        kept = [perm for perm in role.permissions if perm.id not in revoked]
        removed = len(role.permissions) - len(kept)
        role.permissions = kept

        role = await _refreshed(role, db)
    except SQLAlchemyError as exc:
        raise StoreFailure() from exc

    logger.info("Revoked %d permission(s) from role %s", removed, role.name)
    return role


async def replace_permissions(
    role_id: int,
    permission_ids: Sequence[int],
    db: AsyncSession,
) -> Role:
    """Make the role's permission set exactly `permission_ids`."""
    try:
        role = await _lock_role(role_id, db)
        permissions = await _resolve_permissions(permission_ids, db)

        role.permissions = permissions

        role = await _refreshed(role, db)
    except SQLAlchemyError as exc:
        raise StoreFailure() from exc

    logger.info(
        "Replaced permission set of role %s (%d permission(s))",
        role.name,
        len(role.permissions),
    )
    return role

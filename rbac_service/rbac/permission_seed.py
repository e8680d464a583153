"""
Permission, role & user bootstrap.

Run this once against an EMPTY database to populate the permission
catalog, the four default roles and one user per role.  It goes
through the same registry / role store / sync engine as the API, so it
is NOT idempotent: re-running against a populated store raises
`DuplicateName` instead of silently duplicating rows.

Role policy:
    • Admin holds every permission
    • Manager can view & edit users and roles, but not delete anything
      or manage permissions
    • User gets the dashboard and their own account only
    • Viewer can look at users / roles / permissions, never change them

Usage:
    python -m rbac_service.rbac.permission_seed
"""

import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rbac_service.core.config import settings
from rbac_service.models.base import Base
from rbac_service.models.permission import Permission
from rbac_service.rbac.catalog import PermissionName as P
from rbac_service.services import (
    permission_service,
    role_permission_service,
    role_service,
    user_service,
)

logger = logging.getLogger(__name__)

# ────────────────────────────────────────────────────────────────────
# 1.  CANONICAL PERMISSION LIST (catalog order = id order)
# ────────────────────────────────────────────────────────────────────
PERMISSIONS: list[P] = list(P)

# ────────────────────────────────────────────────────────────────────
# 2.  ROLE → PERMISSION MAPPING
# ────────────────────────────────────────────────────────────────────
ROLE_PERMISSIONS: dict[str, list[P]] = {
    "Admin": PERMISSIONS,  # full access
    "Manager": [
        P.VIEW_USERS,
        P.CREATE_USERS,
        P.EDIT_USERS,
        P.VIEW_ROLES,
        P.EDIT_ROLES,
        P.VIEW_PERMISSIONS,
        P.VIEW_DASHBOARD,
        P.MANAGE_ACCOUNT,
    ],
    "User": [
        P.VIEW_DASHBOARD,
        P.MANAGE_ACCOUNT,
    ],
    "Viewer": [
        P.VIEW_USERS,
        P.VIEW_ROLES,
        P.VIEW_PERMISSIONS,
        P.VIEW_DASHBOARD,
        P.MANAGE_ACCOUNT,
    ],
}

# ────────────────────────────────────────────────────────────────────
# 3.  ONE USER PER ROLE
# ────────────────────────────────────────────────────────────────────
USERS: list[dict[str, str]] = [
    {"name": "Admin User", "email": "admin@example.com", "role": "Admin"},
    {"name": "Manager User", "email": "manager@example.com", "role": "Manager"},
    {"name": "Regular User", "email": "user@example.com", "role": "User"},
    {"name": "Viewer User", "email": "viewer@example.com", "role": "Viewer"},
]


# ────────────────────────────────────────────────────────────────────
# 4.  SEED FUNCTION (empty store only)
# ────────────────────────────────────────────────────────────────────
async def seed(session: AsyncSession) -> None:
    """Create the catalog, roles and users.  Raises DuplicateName if present."""

    # ── Permissions ──────────────────────────────────────────────────
    name_to_id: dict[str, int] = {}
    for name in PERMISSIONS:
        perm = await permission_service.create_permission(name.value, session)
        name_to_id[perm.name] = perm.id

    # ── Roles ────────────────────────────────────────────────────────
    role_ids: dict[str, int] = {}
    for role_name, perm_names in ROLE_PERMISSIONS.items():
        role = await role_service.create_role(role_name, session)
        await role_permission_service.assign_permissions(
            role.id,
            [name_to_id[name.value] for name in perm_names],
            session,
        )
        role_ids[role_name] = role.id

    # ── Users ────────────────────────────────────────────────────────
    for udata in USERS:
        await user_service.create_user(
            name=udata["name"],
            email=udata["email"],
            password=settings.SEED_USER_PASSWORD,
            role_id=role_ids[udata["role"]],
            db=session,
        )

    await session.commit()
    logger.info(
        "Seeded %d permissions, %d roles and %d users.",
        len(PERMISSIONS),
        len(ROLE_PERMISSIONS),
        len(USERS),
    )


async def is_store_empty(session: AsyncSession) -> bool:
    count = (await session.execute(select(func.count()).select_from(Permission))).scalar_one()
    return count == 0


# ────────────────────────────────────────────────────────────────────
# 5.  CLI entrypoint:  python -m rbac_service.rbac.permission_seed
# ────────────────────────────────────────────────────────────────────
async def main() -> None:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(engine, expire_on_commit=False)
    try:
        async with async_session() as session:
            await seed(session)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    asyncio.run(main())

"""
Role controller — role CRUD and the role-permission sync endpoints.

Every route uses `Depends(require_permission(...))` for enforcement.
Controllers are THIN — they delegate to services and return schemas.

Sync endpoints share one body shape, `{"role_id": .., "permissions": [..]}`:
    POST   /api/role/permissions  → assign (additive)
    DELETE /api/role/permissions  → revoke
    PUT    /api/role/permissions  → replace the whole set
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_service.core.database import get_db
from rbac_service.models.role import Role
from rbac_service.rbac.catalog import PermissionName
from rbac_service.rbac.dependencies import require_permission
from rbac_service.schemas import (
    CreateRoleRequest,
    MessageResponse,
    PermissionOut,
    RoleOut,
    RolePermissionsRequest,
    UpdateRoleRequest,
    UserSummaryOut,
)
from rbac_service.services import role_permission_service, role_service

router = APIRouter(prefix="/api", tags=["Roles"])


def _role_out(role: Role, include_permissions: bool = True, include_users: bool = True) -> RoleOut:
    return RoleOut(
        id=role.id,
        name=role.name,
        created_at=role.created_at,
        updated_at=role.updated_at,
        permissions=(
            [PermissionOut.model_validate(p) for p in role.permissions]
            if include_permissions
            else None
        ),
        users=(
            [UserSummaryOut.model_validate(u) for u in role.users]
            if include_users
            else None
        ),
    )


# ── Roles ────────────────────────────────────────────────────────────
@router.get(
    "/roles",
    response_model=list[RoleOut],
    response_model_exclude_none=True,
    dependencies=[Depends(require_permission(PermissionName.VIEW_ROLES))],
)
async def list_roles(
    db: AsyncSession = Depends(get_db),
    with_permissions: bool = Query(True),
    with_users: bool = Query(True),
):
    roles = await role_service.list_roles(db, with_permissions, with_users)
    return [_role_out(r, with_permissions, with_users) for r in roles]


@router.post(
    "/roles",
    response_model=RoleOut,
    status_code=201,
    dependencies=[Depends(require_permission(PermissionName.CREATE_ROLES))],
)
async def create_role(body: CreateRoleRequest, db: AsyncSession = Depends(get_db)):
    """Create a role with an empty permission set."""
    role = await role_service.create_role(body.name, db)
    return _role_out(await role_service.get_role(role.id, db))


@router.get(
    "/roles/{role_id}",
    response_model=RoleOut,
    dependencies=[Depends(require_permission(PermissionName.VIEW_ROLES))],
)
async def get_role(role_id: int, db: AsyncSession = Depends(get_db)):
    return _role_out(await role_service.get_role(role_id, db))


@router.put(
    "/roles/{role_id}",
    response_model=RoleOut,
    dependencies=[Depends(require_permission(PermissionName.EDIT_ROLES))],
)
async def update_role(role_id: int, body: UpdateRoleRequest, db: AsyncSession = Depends(get_db)):
    role = await role_service.update_role(role_id, body.name, db)
    return _role_out(await role_service.get_role(role.id, db))


@router.delete(
    "/roles/{role_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_permission(PermissionName.DELETE_ROLES))],
)
async def delete_role(role_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a role.  409 while any user still holds it."""
    await role_service.delete_role(role_id, db)
    return MessageResponse(detail="Role deleted successfully")


# ── Role ↔ permission sync ───────────────────────────────────────────
@router.post(
    "/role/permissions",
    response_model=RoleOut,
    response_model_exclude_none=True,
    dependencies=[Depends(require_permission(PermissionName.ASSIGN_PERMISSIONS))],
)
async def assign_permissions(body: RolePermissionsRequest, db: AsyncSession = Depends(get_db)):
    role = await role_permission_service.assign_permissions(body.role_id, body.permissions, db)
    return _role_out(role, include_users=False)


@router.delete(
    "/role/permissions",
    response_model=RoleOut,
    response_model_exclude_none=True,
    dependencies=[Depends(require_permission(PermissionName.ASSIGN_PERMISSIONS))],
)
async def revoke_permissions(body: RolePermissionsRequest, db: AsyncSession = Depends(get_db)):
    role = await role_permission_service.revoke_permissions(body.role_id, body.permissions, db)
    return _role_out(role, include_users=False)


@router.put(
    "/role/permissions",
    response_model=RoleOut,
    response_model_exclude_none=True,
    dependencies=[Depends(require_permission(PermissionName.ASSIGN_PERMISSIONS))],
)
async def replace_permissions(body: RolePermissionsRequest, db: AsyncSession = Depends(get_db)):
    role = await role_permission_service.replace_permissions(body.role_id, body.permissions, db)
    return _role_out(role, include_users=False)

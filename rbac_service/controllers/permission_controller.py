"""
Permission controller — CRUD over the permission registry.

Deleting a permission also detaches it from every role (handled in
the service, inside the request transaction).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_service.core.database import get_db
from rbac_service.rbac.catalog import PermissionName
from rbac_service.rbac.dependencies import require_permission
from rbac_service.schemas import (
    CreatePermissionRequest,
    MessageResponse,
    PermissionOut,
    UpdatePermissionRequest,
)
from rbac_service.services import permission_service

router = APIRouter(prefix="/api/permissions", tags=["Permissions"])


@router.get(
    "",
    response_model=list[PermissionOut],
    dependencies=[Depends(require_permission(PermissionName.VIEW_PERMISSIONS))],
)
async def list_permissions(db: AsyncSession = Depends(get_db)):
    permissions = await permission_service.list_permissions(db)
    return [PermissionOut.model_validate(p) for p in permissions]


@router.post(
    "",
    response_model=PermissionOut,
    status_code=201,
    dependencies=[Depends(require_permission(PermissionName.CREATE_PERMISSIONS))],
)
async def create_permission(body: CreatePermissionRequest, db: AsyncSession = Depends(get_db)):
    """Register a new permission.  `guard_name` defaults to the configured guard."""
    permission = await permission_service.create_permission(body.name, db, guard_name=body.guard_name)
    return PermissionOut.model_validate(permission)


@router.get(
    "/{permission_id}",
    response_model=PermissionOut,
    dependencies=[Depends(require_permission(PermissionName.VIEW_PERMISSIONS))],
)
async def get_permission(permission_id: int, db: AsyncSession = Depends(get_db)):
    return PermissionOut.model_validate(await permission_service.get_permission(permission_id, db))


@router.put(
    "/{permission_id}",
    response_model=PermissionOut,
    dependencies=[Depends(require_permission(PermissionName.EDIT_PERMISSIONS))],
)
async def update_permission(
    permission_id: int,
    body: UpdatePermissionRequest,
    db: AsyncSession = Depends(get_db),
):
    permission = await permission_service.update_permission(
        permission_id, body.name, db, guard_name=body.guard_name
    )
    return PermissionOut.model_validate(permission)


@router.delete(
    "/{permission_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_permission(PermissionName.DELETE_PERMISSIONS))],
)
async def delete_permission(permission_id: int, db: AsyncSession = Depends(get_db)):
    await permission_service.delete_permission(permission_id, db)
    return MessageResponse(detail="Permission deleted successfully")

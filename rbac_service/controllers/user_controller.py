"""
User controller — user CRUD and role assignment.

Assigning a role is part of user update (`role_id`), since a user
holds exactly one role.  Sending `"role_id": null` explicitly clears it.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_service.core.database import get_db
from rbac_service.rbac.catalog import PermissionName
from rbac_service.rbac.dependencies import require_permission
from rbac_service.schemas import CreateUserRequest, MessageResponse, UpdateUserRequest, UserOut
from rbac_service.services import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "",
    response_model=list[UserOut],
    dependencies=[Depends(require_permission(PermissionName.VIEW_USERS))],
)
async def list_users(db: AsyncSession = Depends(get_db)):
    users = await user_service.list_users(db)
    return [UserOut.model_validate(u) for u in users]


@router.post(
    "",
    response_model=UserOut,
    status_code=201,
    dependencies=[Depends(require_permission(PermissionName.CREATE_USERS))],
)
async def create_user(body: CreateUserRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.create_user(
        name=body.name,
        email=body.email,
        password=body.password,
        role_id=body.role_id,
        db=db,
    )
    return UserOut.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserOut,
    dependencies=[Depends(require_permission(PermissionName.VIEW_USERS))],
)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return UserOut.model_validate(await user_service.get_user_by_id(user_id, db))


@router.put(
    "/{user_id}",
    response_model=UserOut,
    dependencies=[Depends(require_permission(PermissionName.EDIT_USERS))],
)
async def update_user(user_id: int, body: UpdateUserRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.update_user(
        user_id,
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        role_id=body.role_id,
        clear_role="role_id" in body.model_fields_set and body.role_id is None,
    )
    return UserOut.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_permission(PermissionName.DELETE_USERS))],
)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    await user_service.delete_user(user_id, db)
    return MessageResponse(detail="User deleted successfully")

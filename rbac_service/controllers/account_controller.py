"""
Account controller — the caller's own profile.

Authentication only, no permission check: clients call this after
login (and after any role change) to learn which permissions the
current role grants, and every user may edit their own profile.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_service.core.database import get_db
from rbac_service.models.user import User
from rbac_service.rbac.dependencies import get_current_active_user
from rbac_service.schemas import AccountUpdatedOut, UpdateAccountRequest, UserOut
from rbac_service.services import user_service

router = APIRouter(prefix="/api/account", tags=["Account"])


@router.get("", response_model=UserOut)
async def get_account(
    user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Return the current user with their role and its permissions."""
    return UserOut.model_validate(await user_service.get_user_by_id(user.id, db))


@router.put("", response_model=AccountUpdatedOut)
async def update_account(
    body: UpdateAccountRequest,
    user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update name, email or password.  A new password needs the current one."""
    updated = await user_service.update_account(
        user.id,
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        current_password=body.current_password,
    )
    return AccountUpdatedOut(
        message="Account updated successfully",
        user=UserOut.model_validate(updated),
    )

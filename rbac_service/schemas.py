"""
Pydantic schemas for request / response serialization.

Kept in a single file for now — split per-domain when it grows.
Schemas are deliberately decoupled from SQLAlchemy models so the
API surface can evolve independently of the DB layer.
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


# ── Permission ───────────────────────────────────────────────────────
class CreatePermissionRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    guard_name: str | None = Field(default=None, min_length=1, max_length=255)


class UpdatePermissionRequest(CreatePermissionRequest):
    pass


class PermissionOut(BaseModel):
    id: int
    name: str
    guard_name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ── User ─────────────────────────────────────────────────────────────
class UserSummaryOut(BaseModel):
    id: int
    name: str
    email: str
    role_id: int | None = None

    model_config = {"from_attributes": True}


# ── Role ─────────────────────────────────────────────────────────────
class CreateRoleRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class UpdateRoleRequest(CreateRoleRequest):
    pass


class RoleOut(BaseModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime
    # None means "not requested", not "empty".
    permissions: list[PermissionOut] | None = None
    users: list[UserSummaryOut] | None = None


class RoleSummaryOut(BaseModel):
    id: int
    name: str
    permissions: list[PermissionOut] = []

    model_config = {"from_attributes": True}


class RolePermissionsRequest(BaseModel):
    """Body of the assign / revoke / replace endpoints."""

    role_id: int
    permissions: list[int]


# ── User (full) ──────────────────────────────────────────────────────
class CreateUserRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8)
    role_id: int | None = None


class UpdateUserRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    password: str | None = Field(default=None, min_length=8)
    # Explicit `"role_id": null` clears the role; omitting it keeps it.
    role_id: int | None = None


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role_id: int | None = None
    role: RoleSummaryOut | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Account ──────────────────────────────────────────────────────────
class UpdateAccountRequest(BaseModel):
    """Self-service profile update.  Role changes are not possible here."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    current_password: str | None = None
    password: str | None = Field(default=None, min_length=8)
    password_confirmation: str | None = None

    @model_validator(mode="after")
    def _check_password_change(self) -> "UpdateAccountRequest":
        if self.password is None:
            return self
        if not self.current_password:
            raise ValueError("current_password is required to change the password")
        if self.password != self.password_confirmation:
            raise ValueError("password confirmation does not match")
        return self


class AccountUpdatedOut(BaseModel):
    message: str
    user: UserOut


# ── Generic ──────────────────────────────────────────────────────────
class MessageResponse(BaseModel):
    detail: str

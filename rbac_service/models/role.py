"""
Role model & the role ↔ permission association table.

`role_permissions` is a plain association table with a composite
primary key, so a role can never hold the same permission twice.  The
role's permission set is only mutated through
`rbac_service.services.role_permission_service`.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from typing import TYPE_CHECKING

from rbac_service.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin

if TYPE_CHECKING:
    from rbac_service.models.permission import Permission
    from rbac_service.models.user import User

# ── Association table ────────────────────────────────────────────────
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    # ── Relationships ────────────────────────────────────────────────
    permissions: Mapped[list["Permission"]] = relationship(  # noqa: F821
        secondary=role_permissions,
        order_by="Permission.id",
        lazy="selectin",
    )
    # Loaded explicitly (selectinload) when a caller asks for users.
    users: Mapped[list["User"]] = relationship(  # noqa: F821
        back_populates="role",
        order_by="User.id",
        lazy="raise_on_sql",
        passive_deletes=True,
    )

    @property
    def permission_names(self) -> set[str]:
        return {perm.name for perm in self.permissions}

    def __repr__(self) -> str:
        return f"<Role {self.name}>"

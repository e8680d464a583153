"""
User model.

Design decisions:
- Identity and credentials belong to the identity provider; only the
  facet the authorization core needs lives here.
- A user holds AT MOST ONE role (`role_id`, nullable).  A user without
  a role is denied every permission.
- `ON DELETE RESTRICT` backs the service-level "role in use" check.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rbac_service.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rbac_service.models.role import Role


class User(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(512), nullable=False)
    role_id: Mapped[int | None] = mapped_column(
        ForeignKey("roles.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    # ── Relationships ────────────────────────────────────────────────
    role: Mapped["Role | None"] = relationship(  # noqa: F821
        back_populates="users",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"

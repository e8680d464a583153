"""
Permission model.

Permissions are named capability tokens (e.g. `edit_users`).  Routes
declare the name they require; the authorization gate matches it
against the names held by the caller's role.  `guard_name` scopes a
permission to an auth context (session vs. API token) but the name is
unique across all guards.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from rbac_service.core.config import settings
from rbac_service.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin


class Permission(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    guard_name: Mapped[str] = mapped_column(
        String(255),
        default=lambda: settings.DEFAULT_GUARD_NAME,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Permission {self.name} [{self.guard_name}]>"

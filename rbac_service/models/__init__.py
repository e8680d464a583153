"""
Models package — import every model so SQLAlchemy's Base.metadata
knows about all tables (critical for `create_all` / Alembic).
"""

from rbac_service.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin
from rbac_service.models.permission import Permission
from rbac_service.models.role import Role, role_permissions
from rbac_service.models.user import User

__all__ = [
    "Base",
    "IntegerPrimaryKeyMixin",
    "TimestampMixin",
    "Permission",
    "Role",
    "role_permissions",
    "User",
]

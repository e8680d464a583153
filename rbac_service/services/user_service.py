"""
User service — CRUD & the user → role binding.

A user holds at most one role.  `update_user(role_id=...)` is the only
way to change that binding; passing `clear_role=True` removes it, after
which every permission check for the user denies.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_service.core.exceptions import DuplicateName, InvalidCurrentPassword, NotFound
from rbac_service.core.security import hash_password, verify_password
from rbac_service.models.role import Role
from rbac_service.models.user import User

logger = logging.getLogger(__name__)


async def _ensure_email_free(
    email: str,
    db: AsyncSession,
    exclude_id: int | None = None,
) -> None:
    stmt = select(User.id).where(User.email == email)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise DuplicateName("user", email)


async def _ensure_role_exists(role_id: int, db: AsyncSession) -> None:
    if (await db.execute(select(Role.id).where(Role.id == role_id))).first() is None:
        raise NotFound("role", role_id)


async def get_user_by_id(user_id: int, db: AsyncSession) -> User:
    stmt = (
        select(User)
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("user", user_id)
    return user


async def list_users(db: AsyncSession) -> list[User]:
    stmt = select(User).order_by(User.id).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_user(
    name: str,
    email: str,
    password: str,
    role_id: int | None,
    db: AsyncSession,
) -> User:
    await _ensure_email_free(email, db)
    if role_id is not None:
        await _ensure_role_exists(role_id, db)

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role_id=role_id,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise DuplicateName("user", email) from exc

    logger.info("Created user %s (role_id=%s)", email, role_id)
    return await get_user_by_id(user.id, db)


async def update_user(
    user_id: int,
    db: AsyncSession,
    name: str | None = None,
    email: str | None = None,
    password: str | None = None,
    role_id: int | None = None,
    clear_role: bool = False,
) -> User:
    """Partial update.  `role_id` reassigns the role; `clear_role` drops it."""
    user = await get_user_by_id(user_id, db)

    if email is not None and email != user.email:
        await _ensure_email_free(email, db, exclude_id=user.id)
        user.email = email
    if name is not None:
        user.name = name
    if password is not None:
        user.password_hash = hash_password(password)

    if clear_role:
        user.role_id = None
    elif role_id is not None:
        await _ensure_role_exists(role_id, db)
        user.role_id = role_id

    try:
        await db.flush()
    except IntegrityError as exc:
        raise DuplicateName("user", user.email) from exc
    return await get_user_by_id(user.id, db)


async def update_account(
    user_id: int,
    db: AsyncSession,
    name: str | None = None,
    email: str | None = None,
    password: str | None = None,
    current_password: str | None = None,
) -> User:
    """
    Self-service update of the caller's own profile.

    Changing the password requires the current one.  The role binding
    is never touched here.
    """
    user = await get_user_by_id(user_id, db)

    if password is not None:
        if current_password is None or not verify_password(current_password, user.password_hash):
            raise InvalidCurrentPassword()
        user.password_hash = hash_password(password)

    if email is not None and email != user.email:
        await _ensure_email_free(email, db, exclude_id=user.id)
        user.email = email
    if name is not None:
        user.name = name

    try:
        await db.flush()
    except IntegrityError as exc:
        raise DuplicateName("user", user.email) from exc

    logger.info("User %s updated their account", user.id)
    return await get_user_by_id(user.id, db)


async def delete_user(user_id: int, db: AsyncSession) -> None:
    user = await get_user_by_id(user_id, db)
    await db.delete(user)
    await db.flush()
    logger.info("Deleted user %s", user.email)

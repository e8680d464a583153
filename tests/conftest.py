"""Pytest configuration and shared fixtures."""

import os

# Point the module-level engine at SQLite before the app is imported;
# tests never use it, each one gets its own database file below.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from rbac_service.core.database import get_db
from rbac_service.main import create_app
from rbac_service.models import Base, Permission, Role, User
from rbac_service.rbac.permission_seed import seed
from rbac_service.services import permission_service, role_permission_service, role_service, user_service


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh SQLite database file per test, schema created from the models."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'rbac.sqlite'}",
        poolclass=NullPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session for driving services directly.

    Commit explicitly before making HTTP calls: requests run in their
    own sessions and SQLite allows a single writer.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory):
    """Application instance whose requests use the test database."""
    application = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client, no credentials."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Data fixtures
# ============================================================


@pytest.fixture
async def catalog(db: AsyncSession) -> dict[str, Permission]:
    """A small permission registry, keyed by name."""
    names = ["view_users", "edit_users", "delete_users", "view_roles"]
    perms = {}
    for name in names:
        perms[name] = await permission_service.create_permission(name, db)
    return perms


@pytest.fixture
async def manager(db: AsyncSession, catalog: dict[str, Permission]) -> Role:
    """Role "Manager" holding {view_users, edit_users}."""
    role = await role_service.create_role("Manager", db)
    return await role_permission_service.assign_permissions(
        role.id,
        [catalog["view_users"].id, catalog["edit_users"].id],
        db,
    )


@pytest.fixture
async def manager_user(db: AsyncSession, manager: Role) -> User:
    return await user_service.create_user(
        name="Manager User",
        email="manager@example.com",
        password="password123",
        role_id=manager.id,
        db=db,
    )


@pytest.fixture
async def seeded(session_factory) -> dict[str, int]:
    """Run the bootstrap seed; returns user ids keyed by role name."""
    async with session_factory() as session:
        await seed(session)
        result = await session.execute(select(User).order_by(User.id))
        return {user.role.name: user.id for user in result.scalars().all()}

"""
FastAPI application factory.

Assembles the app, registers all routers and exception handlers, and
wires up lifecycle events.  Database schema is managed by Alembic —
NOT create_all.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rbac_service.controllers.account_controller import router as account_router
from rbac_service.controllers.permission_controller import router as permission_router
from rbac_service.controllers.role_controller import router as role_router
from rbac_service.controllers.user_controller import router as user_router
from rbac_service.core.config import settings
from rbac_service.core.database import async_session_factory, engine
from rbac_service.core.error_handlers import register_exception_handlers
from rbac_service.models import Base  # noqa: F401  registers every model

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Optionally bootstrap an empty store, dispose the engine on shutdown.

    NOTE: Run `alembic upgrade head` before starting the app.
    """
    if settings.SEED_ON_STARTUP:
        from rbac_service.rbac.permission_seed import is_store_empty, seed

        async with async_session_factory() as session:
            if await is_store_empty(session):
                await seed(session)
                logger.info("Bootstrap seed complete.")
            else:
                logger.info("Store already populated — skipping bootstrap seed.")

    yield

    await engine.dispose()
    logger.info("Database engine disposed.")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── Register routers ─────────────────────────────────────────────
    app.include_router(account_router)
    app.include_router(user_router)
    app.include_router(role_router)
    app.include_router(permission_router)

    register_exception_handlers(app)

    # ── Health check ─────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()

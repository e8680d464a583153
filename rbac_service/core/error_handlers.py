"""
Exception handlers — map domain exceptions to JSON responses.

Every `RBACError` reaches the client with its status code and a body
that always carries `message`; 403s additionally carry
`required_permission` so the caller can show an actionable message.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from rbac_service.core.exceptions import RBACError, StoreFailure, Unauthenticated

logger = logging.getLogger(__name__)


async def rbac_error_handler(request: Request, exc: RBACError) -> JSONResponse:
    if isinstance(exc, StoreFailure):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc.__cause__)
    else:
        logger.warning(
            "%s on %s %s — %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
        )

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Unhandled store error on %s %s", request.method, request.url.path)
    failure = StoreFailure()
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RBACError, rbac_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)

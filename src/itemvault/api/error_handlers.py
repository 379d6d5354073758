"""Global exception handlers.

Learn: Routes and services raise ItemVaultError subclasses; this module
turns each into exactly one HTTP status with a fixed public body.
Internal detail (which token check failed, database error text) is
logged, never returned.

- ItemVaultError → its status_code + to_response()
- SQLAlchemy connection errors → 503 (StoreUnavailable)
- anything else → 500 with a generic body
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError

from itemvault.errors import ItemVaultError, StoreUnavailable, Unauthorized

logger = structlog.get_logger()


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(ItemVaultError, _itemvault_error_handler)
    for exc_type in (OperationalError, InterfaceError, DisconnectionError):
        app.add_exception_handler(exc_type, _store_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


async def _itemvault_error_handler(request: Request, exc: ItemVaultError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("api.error", code=exc.code, detail=exc.message, path=request.url.path)
    else:
        logger.info("api.rejected", code=exc.code, detail=exc.message, path=request.url.path)

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(
        status_code=exc.status_code, content=exc.to_response(), headers=headers
    )


async def _store_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return await _itemvault_error_handler(request, StoreUnavailable(str(exc)))


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("api.unhandled_error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred", "code": "internal_error"},
    )

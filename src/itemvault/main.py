"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Settings are read once here and turned into the two immutable
auth collaborators, the TokenCodec and the PasswordHasher, which hang off
app.state for the dependencies in auth/dependencies.py to hand out.
Lifespan manages shutdown of the database engine.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from itemvault import __version__
from itemvault.api import api_router
from itemvault.api.error_handlers import register_error_handlers
from itemvault.auth.password import PasswordHasher
from itemvault.auth.tokens import TokenCodec
from itemvault.config import Settings, settings
from itemvault.logging_config import configure_logging
from itemvault.middleware.request_id import RequestIdMiddleware
from itemvault.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    app_settings: Settings = app.state.settings
    logger.info(
        "itemvault.starting",
        version=__version__,
        environment=app_settings.environment,
        port=app_settings.port,
    )

    yield

    logger.info("itemvault.shutdown")

    from itemvault.db.engine import engine
    await engine.dispose()


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    app_settings = app_settings or settings
    configure_logging(app_settings)

    app = FastAPI(
        title="ItemVault",
        description="Multi-tenant item store with stateless token auth",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.token_codec = TokenCodec(
        secret=app_settings.jwt_secret,
        ttl_seconds=app_settings.token_ttl_seconds,
        algorithm=app_settings.jwt_algorithm,
    )
    app.state.password_hasher = PasswordHasher(
        rounds=app_settings.bcrypt_rounds,
        min_length=app_settings.min_password_length,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → handler

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: itemvault.main:app)
app = create_app()

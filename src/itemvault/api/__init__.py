"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Health, signup and login are
open (no auth required). Handlers on protected routers also take the
identity as an argument; FastAPI caches the dependency, so the token is
verified once per request.
"""

from fastapi import APIRouter, Depends

from itemvault.api.auth import protected_router as auth_protected_router
from itemvault.api.auth import router as auth_router
from itemvault.api.health import router as health_router
from itemvault.api.items import router as items_router
from itemvault.auth.dependencies import get_current_identity

# All protected routers require authentication
_auth = [Depends(get_current_identity)]

api_router = APIRouter(prefix="/api/v1")

# Open routes (no auth required)
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes (require a valid Bearer token)
api_router.include_router(auth_protected_router, tags=["auth"], dependencies=_auth)
api_router.include_router(items_router, tags=["items"], dependencies=_auth)

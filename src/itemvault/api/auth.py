"""Auth API — signup, login, current user.

Learn: Routes for user authentication:
- POST /auth/signup → create a user account, returns token + user (public)
- POST /auth/login → email/password → token + user (public)
- GET /auth/me → current user info (protected)

signup and login live on the open router; /me lives on a separate router
that api/__init__.py mounts behind the identity gate.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from itemvault.auth.dependencies import (
    CurrentIdentity,
    get_current_identity,
    get_password_hasher,
    get_token_codec,
)
from itemvault.auth.password import PasswordHasher
from itemvault.auth.tokens import TokenCodec
from itemvault.db.engine import get_db
from itemvault.errors import NotFound
from itemvault.schemas.auth import AuthResponse, LoginRequest, SignupRequest, UserRead
from itemvault.services.auth_service import AuthService, AuthResult
from itemvault.services.user_service import UserService

router = APIRouter(prefix="/auth")
protected_router = APIRouter(prefix="/auth")


def _svc(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    codec: TokenCodec = Depends(get_token_codec),
) -> AuthService:
    return AuthService(UserService(db), hasher, codec)


def _response(result: AuthResult) -> AuthResponse:
    return AuthResponse(token=result.token, user=UserRead.model_validate(result.user))


# ─── Signup ──────────────────────────────────────────────


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(body: SignupRequest, svc: AuthService = Depends(_svc)):
    """Create a new user account and return a token for it."""
    result = await svc.signup(
        email=body.email, username=body.username, password=body.password
    )
    return _response(result)


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    """Login with email and password → fresh token."""
    result = await svc.login(email=body.email, password=body.password)
    return _response(result)


# ─── Current user ───────────────────────────────────────


@protected_router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user's info.

    The token is self-contained, so a user removed after issuance still
    gets past the gate; here that surfaces as 404.
    """
    user = await UserService(db).find_by_id(identity.user_id)
    if not user:
        raise NotFound("User not found")
    return user

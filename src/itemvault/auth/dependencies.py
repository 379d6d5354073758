"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request.

The gate is attached only to protected routers (see api/__init__.py).
It turns "Authorization: Bearer <jwt>" into a CurrentIdentity, or stops
the request with 401 before any handler code or database access runs.
It never loads the User row; handlers that need it do that themselves.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from itemvault.auth.password import PasswordHasher
from itemvault.auth.tokens import TokenCodec
from itemvault.errors import MalformedSubject, MissingCredential, Unauthorized

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated caller for one request.

    Learn: user_id is parsed to a UUID once, here. Everything downstream
    takes it as-is and scopes its queries by it.
    """

    user_id: uuid.UUID


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def resolve_identity(
    authorization: Optional[str],
    codec: TokenCodec,
    now: Optional[datetime] = None,
) -> uuid.UUID:
    """Turn a raw Authorization header value into a verified user id.

    Raises MissingCredential, MalformedSubject, or a TokenError subclass.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingCredential("Missing or non-Bearer authorization header")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise MissingCredential("Empty bearer token")

    claims = codec.verify(token, now)

    try:
        return uuid.UUID(claims.sub)
    except ValueError as e:
        raise MalformedSubject("Token subject is not a user id") from e


async def get_current_identity(
    authorization: Optional[str] = Header(None),
    codec: TokenCodec = Depends(get_token_codec),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if missing or invalid)."""
    try:
        user_id = resolve_identity(authorization, codec)
    except Unauthorized as e:
        # Which check failed is for the logs only; the response is generic.
        logger.info("auth.token_rejected", reason=type(e).__name__, detail=e.message)
        raise

    structlog.contextvars.bind_contextvars(user_id=str(user_id))
    return CurrentIdentity(user_id=user_id)

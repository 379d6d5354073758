"""Auth service — signup and login flows.

Learn: Both flows end the same way: a fresh token plus the public view
of the user. Nothing is persisted besides the User row at signup.

Signup: check email/username free → hash → insert → issue token
Login:  find by email → verify password → issue token

Login fails with the same AuthenticationFailed for an unknown email and
for a wrong password, and runs a bcrypt verification in both cases, so
neither the response nor its timing says which one it was.

bcrypt is deliberately slow, so hashing runs in the threadpool instead
of on the event loop.
"""

from dataclasses import dataclass

import structlog
from starlette.concurrency import run_in_threadpool

from itemvault.auth.password import PasswordHasher
from itemvault.auth.tokens import TokenCodec
from itemvault.db.models import User
from itemvault.errors import AuthenticationFailed, Conflict
from itemvault.services.user_service import UserService

logger = structlog.get_logger()


@dataclass
class AuthResult:
    token: str
    user: User


class AuthService:
    """Turns raw credentials into a user and a fresh token."""

    def __init__(self, users: UserService, hasher: PasswordHasher, codec: TokenCodec):
        self.users = users
        self.hasher = hasher
        self.codec = codec

    async def signup(self, email: str, username: str, password: str) -> AuthResult:
        self.hasher.validate(password)
        if await self.users.exists(email, username):
            logger.info("auth.signup_conflict")
            raise Conflict()

        password_hash = await run_in_threadpool(self.hasher.hash, password)
        user = await self.users.insert(email, username, password_hash)

        logger.info("auth.signup", user_id=str(user.id))
        return AuthResult(token=self.codec.issue(str(user.id)), user=user)

    async def login(self, email: str, password: str) -> AuthResult:
        user = await self.users.find_by_email(email)

        if user is None:
            await run_in_threadpool(self.hasher.verify_dummy, password)
            logger.info("auth.login_failed", reason="unknown_email")
            raise AuthenticationFailed()

        if not await run_in_threadpool(self.hasher.verify, password, user.password_hash):
            logger.info("auth.login_failed", reason="bad_password", user_id=str(user.id))
            raise AuthenticationFailed()

        logger.info("auth.login", user_id=str(user.id))
        return AuthResult(token=self.codec.issue(str(user.id)), user=user)

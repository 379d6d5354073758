"""User service — the credential store.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database.

The existence check in exists() is only there to give a friendly 409.
The unique constraints on users.email and users.username are what
actually stop two concurrent signups with the same address; insert()
turns that IntegrityError into the same Conflict.
"""

import uuid

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from itemvault.db.models import User
from itemvault.errors import Conflict


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Lookup and insert for user identities."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalars().first()

    async def find_by_id(self, user_id: uuid.UUID) -> User | None:
        return await self.db.get(User, user_id)

    async def exists(self, email: str, username: str) -> bool:
        result = await self.db.execute(
            select(User.id).where(
                or_(User.email == normalize_email(email), User.username == username)
            )
        )
        return result.first() is not None

    async def insert(self, email: str, username: str, password_hash: str) -> User:
        """Persist a new user in one INSERT + commit.

        Raises Conflict if email or username is already taken.
        """
        user = User(
            email=normalize_email(email),
            username=username,
            password_hash=password_hash,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise Conflict() from e
        await self.db.refresh(user)
        return user

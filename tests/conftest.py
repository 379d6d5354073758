"""Test fixtures — in-memory SQLite per test, real auth pipeline.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets a fresh in-memory SQLite database (aiosqlite, StaticPool
   so every session sees the same connection) with all tables created.
2. The app is built with create_app(test_settings): a fixed signing secret
   and bcrypt rounds=4 so hashing is fast.
3. Only get_db is overridden. The identity gate is NOT mocked — protected
   routes are exercised with real tokens from /auth/signup.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from itemvault.config import Settings
from itemvault.db.engine import get_db
from itemvault.db.models import Base
from itemvault.main import create_app

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET = "test-signing-secret-0123456789abcdef0123456789abcdef"
DEFAULT_PASSWORD = "longenough1"


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        database_url=TEST_DB_URL,
        jwt_secret=TEST_SECRET,
        environment="test",
        bcrypt_rounds=4,
        token_ttl_seconds=3600,
    )


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
def app(test_settings, session_factory):
    application = create_app(test_settings)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def codec(app):
    return app.state.token_codec


@pytest.fixture()
def signup(client):
    """Factory: sign up a fresh user, return the response JSON."""

    async def _signup(email=None, username=None, password=DEFAULT_PASSWORD):
        run_id = uuid.uuid4().hex[:8]
        r = await client.post(
            "/api/v1/auth/signup",
            json={
                "email": email or f"user-{run_id}@example.com",
                "username": username or f"user_{run_id}",
                "password": password,
            },
        )
        assert r.status_code == 201, r.text
        return r.json()

    return _signup


class _DownSession:
    """Stands in for a session whose database connection is gone."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))

    async def scalar(self, *args, **kwargs):
        return await self.execute(*args, **kwargs)

    async def get(self, *args, **kwargs):
        return await self.execute(*args, **kwargs)

    async def rollback(self):
        pass


@pytest.fixture()
def store_down(app):
    """Point get_db at a session that fails every statement."""

    async def override_get_db():
        yield _DownSession()

    app.dependency_overrides[get_db] = override_get_db
    return app

"""
Shared fixtures: in-memory database, fake mailer, gateway and HTTP client.

Run with: pytest -v
"""

import os

# Must be set before the app modules read their settings
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SMTP_HOST", "")

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.dependencies import DbSession, get_auth_gateway
from app.db.session import Base, get_db
from app.services.auth_gateway import AuthGateway
from app.services.credential_store import CredentialStore
from app.services.storage_service import StorageService

import app.models  # noqa: F401


@pytest.fixture
def signup_data():
    return {
        "name": "Alice",
        "username": "alice1",
        "password": "p@ssw0rd",
        "email": "a@x.com",
        "dob": date(2000, 1, 1),
    }


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mailer():
    """Records (email, username, code) for every OTP dispatch."""
    fake = MagicMock()
    fake.send_otp = AsyncMock(return_value=True)
    return fake


@pytest.fixture
def storage(tmp_path):
    return StorageService(str(tmp_path / "uploads"))


@pytest.fixture
def store(db):
    return CredentialStore(db)


@pytest.fixture
def gateway(store, mailer, storage):
    return AuthGateway(store, mailer, storage)


@pytest_asyncio.fixture
async def client(session_factory, mailer, storage):
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    def override_get_auth_gateway(db: DbSession) -> AuthGateway:
        return AuthGateway(CredentialStore(db), mailer, storage)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_auth_gateway] = override_get_auth_gateway

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

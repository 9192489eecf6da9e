"""
Pytest configuration and fixtures.
Provides test database, client, fake repositories and common test utilities.
"""

import os

# Must be set before the application settings are imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DISABLE_BOOTSTRAP_USERS", "true")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from shortener.api.deps import get_authenticator
from shortener.core.exceptions import ConflictError, NoAffectedError, NotFoundError
from shortener.core.security import Authenticator, generate_private_key_pem
from shortener.db.session import get_session
from shortener.main import app
from shortener.models.url import URL
from shortener.models.user import User, UserRole
from shortener.repositories.user_repository import SQLUserRepository
from shortener.schemas.token import Claims
from shortener.schemas.user import UserCreate
from shortener.services.user_service import UserService

TEST_KEY_ID = "test-key"
TEST_PASSWORD = "testpassword123"
ADMIN_PASSWORD = "adminpassword123"


class FakeURLRepository:
    """In-memory URL repository; returns copies so callers never share state with storage."""

    def __init__(self) -> None:
        self.items: Dict[str, URL] = {}

    async def get_by_id(self, url_id: str) -> URL:
        if url_id not in self.items:
            raise NotFoundError(f"URL was not found: {url_id}")
        return URL(**self.items[url_id].model_dump())

    async def store(self, url: URL) -> None:
        if url.id in self.items:
            raise ConflictError(f"URL already exists: {url.id}")
        self.items[url.id] = URL(**url.model_dump())

    async def update(self, url: URL) -> None:
        if url.id not in self.items:
            raise NoAffectedError()
        self.items[url.id] = URL(**url.model_dump())

    async def delete(self, url_id: str) -> None:
        if self.items.pop(url_id, None) is None:
            raise NoAffectedError()


class FakeUserRepository:
    """In-memory user repository enforcing unique emails."""

    def __init__(self) -> None:
        self.items: Dict[str, User] = {}

    async def get_by_id(self, user_id: str) -> User:
        if user_id not in self.items:
            raise NotFoundError(f"User was not found: {user_id}")
        return User(**self.items[user_id].model_dump())

    async def get_by_email(self, email: str) -> User:
        for user in self.items.values():
            if user.email == email:
                return User(**user.model_dump())
        raise NotFoundError(f"User was not found: {email}")

    async def create(self, user: User) -> None:
        if user.id in self.items or any(u.email == user.email for u in self.items.values()):
            raise ConflictError()
        self.items[user.id] = User(**user.model_dump())

    async def update(self, user: User) -> None:
        if user.id not in self.items:
            raise NoAffectedError()
        if any(u.email == user.email and u.id != user.id for u in self.items.values()):
            raise ConflictError()
        self.items[user.id] = User(**user.model_dump())

    async def delete(self, user_id: str) -> None:
        if self.items.pop(user_id, None) is None:
            raise NoAffectedError()


def make_claims(subject: str, *roles: str, ttl: timedelta = timedelta(hours=1)) -> Claims:
    return Claims.new(subject, list(roles) or [UserRole.USER.value], datetime.now(timezone.utc), ttl)


@pytest.fixture(scope="session")
def private_key_pem() -> str:
    """RSA key generated once per test session."""
    return generate_private_key_pem()


@pytest.fixture(scope="session")
def authenticator(private_key_pem: str) -> Authenticator:
    return Authenticator.from_private_key(private_key_pem, TEST_KEY_ID, "RS256")


@pytest.fixture
def url_repository() -> FakeURLRepository:
    return FakeURLRepository()


@pytest.fixture
def user_repository() -> FakeUserRepository:
    return FakeUserRepository()


@pytest_asyncio.fixture(name="engine")
async def engine_fixture() -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a test database engine.
    Uses an in-memory SQLite database for fast tests.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(name="session_factory")
def session_factory_fixture(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(name="session")
async def session_fixture(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session_factory: async_sessionmaker[AsyncSession],
    authenticator: Authenticator,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with dependency overrides.
    """

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_authenticator] = lambda: authenticator

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(name="test_user")
async def test_user_fixture(session: AsyncSession) -> User:
    """
    Create a test user.
    """
    service = UserService(SQLUserRepository(session), timeout=5)
    return await service.create(
        UserCreate(email="test@example.com", password=TEST_PASSWORD, full_name="Test User")
    )


@pytest_asyncio.fixture(name="other_user")
async def other_user_fixture(session: AsyncSession) -> User:
    service = UserService(SQLUserRepository(session), timeout=5)
    return await service.create(
        UserCreate(email="other@example.com", password=TEST_PASSWORD, full_name="Other User")
    )


@pytest_asyncio.fixture(name="test_admin")
async def test_admin_fixture(session: AsyncSession) -> User:
    """
    Create a test admin user.
    """
    service = UserService(SQLUserRepository(session), timeout=5)
    return await service.create(
        UserCreate(email="admin@example.com", password=ADMIN_PASSWORD, full_name="Admin User"),
        roles=[UserRole.ADMIN.value],
    )


@pytest.fixture(name="user_token")
def user_token_fixture(authenticator: Authenticator, test_user: User) -> str:
    """
    Get an access token for a regular user.
    """
    return authenticator.generate_token(make_claims(test_user.id, *test_user.roles))


@pytest.fixture(name="other_token")
def other_token_fixture(authenticator: Authenticator, other_user: User) -> str:
    return authenticator.generate_token(make_claims(other_user.id, *other_user.roles))


@pytest.fixture(name="admin_token")
def admin_token_fixture(authenticator: Authenticator, test_admin: User) -> str:
    """
    Get an access token for an admin user.
    """
    return authenticator.generate_token(make_claims(test_admin.id, *test_admin.roles))


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}

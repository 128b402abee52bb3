"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.user import User
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.security.password_hasher import BcryptPasswordHasher
from infrastructure.storage.local_disk import LocalDisk

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "original-secret"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    """Cheap bcrypt cost so tests stay fast."""
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def disk(tmp_path: Path) -> LocalDisk:
    return LocalDisk(tmp_path / "storage", base_url="/storage")


@pytest.fixture
async def db_user(
    session_factory: async_sessionmaker[AsyncSession], hasher: BcryptPasswordHasher
) -> User:
    """The user who is signed in during API tests."""
    async with SQLAlchemyUnitOfWork(session_factory) as uow:
        user = await uow.users.create(
            User(
                name="Test User",
                email="test@example.com",
                password=hasher.hash(TEST_PASSWORD),
            )
        )
        await uow.commit()
    return user


@pytest.fixture
async def other_user(
    session_factory: async_sessionmaker[AsyncSession], hasher: BcryptPasswordHasher
) -> User:
    """A second user whose email is already taken."""
    async with SQLAlchemyUnitOfWork(session_factory) as uow:
        user = await uow.users.create(
            User(
                name="Other User",
                email="other@example.com",
                password=hasher.hash("other-secret"),
            )
        )
        await uow.commit()
    return user


@pytest.fixture
def test_user(db_user: User) -> TokenUser:
    """Token identity for the signed-in user."""
    return TokenUser(id=db_user.id, email=db_user.email, name=db_user.name)


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def authenticated_client(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
    auth_headers: dict[str, str],
    hasher: BcryptPasswordHasher,
    disk: LocalDisk,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create authenticated test client with database, storage and auth overrides.

    This client:
    - Uses an in-memory SQLite database holding the signed-in user
    - Stores avatars on a temporary local disk
    - Validates real bearer tokens signed with the test secret
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import get_password_hasher, get_storage, get_uow_factory
    from main import create_app

    app = create_app()

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_uow_factory] = lambda: test_uow_factory
    app.dependency_overrides[get_storage] = lambda: disk
    app.dependency_overrides[get_password_hasher] = lambda: hasher

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c

    app.dependency_overrides.clear()

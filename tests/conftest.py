
import os

# Configure before the app (and its cached settings) is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from app.core.security import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models import UserRole
from tests.fixtures.test_data import generate_job, generate_profile, generate_user

# Use in-memory SQLite for tests by default, unless TEST_DATABASE_URL is set
TEST_DB_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def auth_headers(user) -> dict:
    """Bearer header for a user."""
    token = create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def test_engine():
    """Function-scoped test database engine; every test starts from empty tables."""
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False} if "sqlite" in TEST_DB_URL else {},
        poolclass=StaticPool if "sqlite" in TEST_DB_URL else None,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session shared by fixtures and the app under test."""
    session_maker = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Test client with override for get_db."""
    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def admin_user(db_session):
    user = generate_user(UserRole.ADMIN)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def client_user(db_session):
    user = generate_user(UserRole.CLIENT)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def developer(db_session):
    """Developer with a Python/FastAPI profile."""
    user = generate_user(UserRole.DEVELOPER)
    db_session.add(user)
    db_session.add(generate_profile(user, skills=["Python", "FastAPI"]))
    await db_session.commit()
    return user


@pytest.fixture
async def other_developer(db_session):
    """Second developer with a frontend profile."""
    user = generate_user(UserRole.DEVELOPER)
    db_session.add(user)
    db_session.add(generate_profile(user, skills=["React", "TypeScript"]))
    await db_session.commit()
    return user


@pytest.fixture
async def job(db_session, client_user):
    """Approved job owned by client_user requiring Python."""
    job = generate_job(client_user)
    db_session.add(job)
    await db_session.commit()
    return job


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def client_headers(client_user):
    return auth_headers(client_user)


@pytest.fixture
def developer_headers(developer):
    return auth_headers(developer)

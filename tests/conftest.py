"""
Pytest fixtures for workout tracker tests.

Every test gets its own SQLite file so foreign keys and cascades behave
like they do in production.
"""

import os
import tempfile
import uuid
from typing import AsyncGenerator

# Settings are read at import time, so the environment must be ready first
_tmp_dir = tempfile.mkdtemp(prefix="workout-tracker-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp_dir}/app.db"
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_DEMO_DATA"] = "true"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from workout_tracker.config import get_settings

get_settings.cache_clear()

from workout_tracker.database import build_engine, build_session_maker, get_db
from workout_tracker.kernel.identity.identity_service import IdentityService
from workout_tracker.kernel.identity.jwt import JWTManager
from workout_tracker.kernel.identity.password import PasswordHasher
from workout_tracker.kernel.models import Base, User
from workout_tracker.kernel.store import RecordStore
from workout_tracker.main import app

TEST_SECRET = "test-secret-key-for-testing-only-0123456789"


def pytest_sessionfinish(session, exitstatus):
    """Clean up the temp DB directory after the run."""
    import shutil

    shutil.rmtree(_tmp_dir, ignore_errors=True)


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Engine on an empty per-test SQLite file."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def schema(db_engine: AsyncEngine) -> AsyncEngine:
    """Create all tables on the test engine."""
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return db_engine


@pytest.fixture
def session_maker(db_engine: AsyncEngine):
    return build_session_maker(db_engine)


@pytest_asyncio.fixture
async def db_session(schema, session_maker) -> AsyncGenerator[AsyncSession, None]:
    """A session on the test schema."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(db_session: AsyncSession) -> RecordStore:
    return RecordStore(db_session, timeout_seconds=5)


@pytest.fixture
def hasher() -> PasswordHasher:
    """Cheap work factor so tests stay fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(
        secret_key=TEST_SECRET,
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def identity_service(store, hasher, jwt_manager) -> IdentityService:
    return IdentityService(store, hasher=hasher, jwt_manager=jwt_manager)


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession, hasher: PasswordHasher) -> User:
    """Create a test user."""
    user = User(
        id=uuid.uuid4(),
        email="testuser@example.com",
        password_hash=hasher.hash("TestPassword123"),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def app_db(session_maker):
    """Route the app's request sessions to the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def client(schema, app_db) -> AsyncGenerator[AsyncClient, None]:
    """Async client whose requests use the test database."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient) -> dict:
    """Register a fresh user through the API and return its bearer header."""
    r = await client.post(
        "/api/v1/auth/register",
        json={"email": f"user-{uuid.uuid4().hex[:8]}@example.com", "password": "SecurePass123"},
    )
    assert r.status_code == 201, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}

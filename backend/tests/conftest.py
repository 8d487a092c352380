"""
Registration Portal - Test Configuration and Fixtures
"""
import asyncio
import os
from typing import Any, AsyncGenerator, Callable, Dict, Generator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker
from starlette.testclient import TestClient

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_registrations.db'
os.environ['CORS_ORIGINS_STR'] = 'http://localhost:3000'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_LEVEL'] = 'WARNING'

from app.main import app
from app.core.database import Base, get_db

fake = Faker()

ALLOWED_ORIGIN = 'http://localhost:3000'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_registrations.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def create_tables() -> None:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    await create_tables()

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    await drop_tables()


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


def build_registration(**overrides: Any) -> Dict[str, Any]:
    """A valid camelCase registration payload"""
    data = {
        'fullName': fake.name(),
        'email': fake.unique.email(),
        'phone': fake.numerify('##########'),
        'qualification': 'B.Tech',
        'passingYear': 2022,
        'service': 'EduTech',
        'course': 'Online Tutoring',
        'message': fake.sentence(),
    }
    data.update(overrides)
    return data


@pytest.fixture
def registration_data() -> Callable[..., Dict[str, Any]]:
    """Factory for valid registration payloads"""
    return build_registration


@pytest.fixture
def ws_client() -> Generator[TestClient, None, None]:
    """
    Sync client running the full app (lifespan included) on one event loop,
    so websocket sessions and HTTP calls share the admin channel.
    """
    async def override_get_db():
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as tc:
        yield tc

    app.dependency_overrides.clear()
    asyncio.run(drop_tables())

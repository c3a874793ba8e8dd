"""
Vital Records Registry - Test Configuration and Fixtures
"""
import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable
from unittest.mock import patch, AsyncMock

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment before the settings object is created
TEST_DIR = Path(tempfile.mkdtemp(prefix="vital_registry_tests_"))
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{TEST_DIR / "test.db"}'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''
os.environ['UPLOAD_PATH'] = str(TEST_DIR / "uploads")
os.environ['SENDGRID_API_KEY'] = ''
os.environ['SMTP_USER'] = ''
os.environ['SMTP_PASSWORD'] = ''
os.environ['PREAUTHORIZED_IDENTITIES_STR'] = ''

from vital_registry.main import app
from vital_registry.core.database import Base, get_db
from vital_registry.core.security import get_password_hash
from vital_registry.models.user import User, UserRole
from vital_registry.services.identity_cache import identity_cache

fake = Faker()

DEFAULT_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = os.environ['DATABASE_URL']
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(autouse=True)
def clear_identity_cache():
    """Each test starts with an empty identity cache"""
    identity_cache.clear()
    yield
    identity_cache.clear()


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_factory(db_session: AsyncSession) -> async_sessionmaker:
    """Independent sessions on the test database (tables already created)"""
    return TestSessionLocal


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


@pytest.fixture
def user_factory(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Create users directly in the database"""
    async def create_user(
        role: UserRole = UserRole.PUBLIC,
        password: str = DEFAULT_PASSWORD,
        is_verified: bool = True,
        email: str = None,
    ) -> User:
        user = User(
            email=(email or fake.unique.email()).lower(),
            hashed_password=get_password_hash(password),
            first_name=fake.first_name(),
            last_name=fake.last_name(),
            role=role,
            is_verified=is_verified,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return create_user


@pytest.fixture
async def test_user(user_factory) -> User:
    """A verified public user"""
    return await user_factory(UserRole.PUBLIC)


@pytest.fixture
async def registrar_user(user_factory) -> User:
    return await user_factory(UserRole.REGISTRAR)


@pytest.fixture
async def admin_user(user_factory) -> User:
    return await user_factory(UserRole.ADMIN)


@pytest.fixture
def login(client: AsyncClient) -> Callable[..., Awaitable]:
    """Sign a user in; the session cookie lands in the client's cookie jar"""
    async def do_login(user: User, password: str = DEFAULT_PASSWORD):
        client.cookies.clear()
        response = await client.post(
            "/api/auth/login",
            json={"email": user.email, "password": password}
        )
        assert response.status_code == 200, response.text
        return response

    return do_login


@pytest.fixture
def mock_email():
    """Capture outgoing account emails instead of sending them"""
    with patch("vital_registry.services.credential_store.email_service") as mock:
        mock.send_verification_email = AsyncMock(return_value=True)
        mock.send_password_reset_email = AsyncMock(return_value=True)
        yield mock


def birth_payload(**overrides) -> dict:
    """A complete birth registration form (camelCase, as the client sends it)"""
    payload = {
        "childName": fake.name(),
        "childSex": "female",
        "dateOfBirth": "2026-01-15",
        "timeOfBirth": "08:30",
        "placeOfBirth": "Korle Bu Teaching Hospital",
        "fatherName": fake.name_male(),
        "fatherNationalId": "GHA-123456789-0",
        "fatherOccupation": "Farmer",
        "motherName": fake.name_female(),
        "motherNationalId": "GHA-987654321-0",
        "motherDateOfBirth": "1994-03-02",
    }
    payload.update(overrides)
    return payload


def death_payload(**overrides) -> dict:
    """A complete death registration form"""
    payload = {
        "deceasedName": fake.name(),
        "dateOfDeath": "2026-02-01",
        "placeOfDeath": "Ridge Hospital",
        "causeOfDeath": "Cardiac arrest",
        "nextOfKinName": fake.name(),
        "nextOfKinRelationship": "Son",
        "nextOfKinContact": "+233200000000",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def birth_form() -> Callable[..., dict]:
    return birth_payload


@pytest.fixture
def death_form() -> Callable[..., dict]:
    return death_payload

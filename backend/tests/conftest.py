"""
Prefect Portal - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

TEST_DIR = tempfile.mkdtemp(prefix="prefect-portal-tests-")

# Set testing environment before the app reads its settings
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DEBUG'] = 'false'
os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{TEST_DIR}/test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['REALTIME_REDIS_URL'] = ''
os.environ['STORAGE_BACKEND'] = 'local'
os.environ['STORAGE_LOCAL_PATH'] = os.path.join(TEST_DIR, 'media')
os.environ['STORAGE_PUBLIC_URL'] = 'http://test/media'

from prefect_portal.core.database import Base, get_engine, get_session_local  # noqa: E402
from prefect_portal.core.security import create_access_token, get_password_hash  # noqa: E402
from prefect_portal.main import app  # noqa: E402
from prefect_portal.models.user import AppRole, User, UserRoleAssignment  # noqa: E402
from prefect_portal.modules.auth.session import PortalSession  # noqa: E402

fake = Faker()

TEST_PASSWORD = 'password123'


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh tables and a session for each test"""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with get_session_local()() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app; requests use their own sessions on the same database"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory: ``await make_user(AppRole.PREFECT, department="Science")``"""
    async def _make(*roles: AppRole, **fields) -> User:
        user = User(
            email=fields.pop('email', fake.unique.email()),
            hashed_password=get_password_hash(fields.pop('password', TEST_PASSWORD)),
            first_name=fields.pop('first_name', fake.first_name()),
            last_name=fields.pop('last_name', fake.last_name()),
            **fields,
        )
        user.role_assignments = [UserRoleAssignment(role=AppRole(role)) for role in roles]
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


def auth_headers_for(user: User) -> dict:
    token = create_access_token({'sub': str(user.id), 'email': user.email})
    return {'Authorization': f'Bearer {token}'}


def session_for(user: User) -> PortalSession:
    return PortalSession.for_user(user)


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(AppRole.ADMIN)


@pytest.fixture
async def prefect_user(make_user) -> User:
    return await make_user(AppRole.PREFECT)


@pytest.fixture
async def faculty_user(make_user) -> User:
    return await make_user(AppRole.FACULTY)


@pytest.fixture
async def student_user(make_user) -> User:
    return await make_user(AppRole.STUDENT)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def prefect_headers(prefect_user: User) -> dict:
    return auth_headers_for(prefect_user)


@pytest.fixture
def faculty_headers(faculty_user: User) -> dict:
    return auth_headers_for(faculty_user)


@pytest.fixture
def student_headers(student_user: User) -> dict:
    return auth_headers_for(student_user)

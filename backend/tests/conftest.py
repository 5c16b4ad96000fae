"""
RoomRoster - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import AsyncGenerator, Callable, Dict, List, Optional
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['SEED_ON_STARTUP'] = 'false'
os.environ['UPLOAD_PATH'] = tempfile.mkdtemp(prefix='roomroster-uploads-')

from app.main import app
from app.core.database import Base, get_db
from app.models import User, UserRole, Profession, Subject
from app.core.security import get_password_hash, create_access_token

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSessionLocal = sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


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
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        try:
            yield db_session
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Users ====================

async def _create_user(db_session: AsyncSession, role: UserRole, password: str,
                       is_active: bool = True) -> Dict[str, str]:
    user = User(
        email=fake.unique.email().lower(),
        hashed_password=get_password_hash(password),
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    await db_session.commit()
    return {'id': str(user.id), 'email': user.email, 'password': password, 'role': role.value}


@pytest.fixture
async def test_user(db_session: AsyncSession) -> Dict[str, str]:
    """Create a regular test user (returned as plain data)"""
    return await _create_user(db_session, UserRole.USER, 'testpassword123')


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> Dict[str, str]:
    """Create an admin test user"""
    return await _create_user(db_session, UserRole.ADMIN, 'adminpassword123')


@pytest.fixture
async def inactive_user(db_session: AsyncSession) -> Dict[str, str]:
    return await _create_user(db_session, UserRole.USER, 'inactivepassword', is_active=False)


def _headers_for(user: Dict[str, str]) -> dict:
    token = create_access_token({
        'sub': user['id'],
        'email': user['email'],
        'role': user['role'],
    })
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(test_user: Dict[str, str]) -> dict:
    """Generate authentication headers for test user"""
    return _headers_for(test_user)


@pytest.fixture
def admin_auth_headers(admin_user: Dict[str, str]) -> dict:
    """Generate authentication headers for admin user"""
    return _headers_for(admin_user)


# ==================== Catalogs ====================

@pytest.fixture
async def professions(db_session: AsyncSession) -> List[str]:
    """Seed a few professions; returns their names"""
    names = ['Designer', 'Developer', 'Teacher']
    for name in names:
        db_session.add(Profession(name=name))
    await db_session.commit()
    return names


@pytest.fixture
async def subject_ids(db_session: AsyncSession) -> List[str]:
    """Seed a few subjects; returns their ids"""
    subjects = [Subject(name=name) for name in ('Mathematics', 'Physics', 'Art')]
    db_session.add_all(subjects)
    await db_session.commit()
    return [str(s.id) for s in subjects]


# ==================== API factories ====================
# Objects are created through the API and referenced by id only, so a
# rollback after a failing request never leaves expired instances behind.

@pytest.fixture
def make_profile(client: AsyncClient) -> Callable:
    async def _make(first_name: Optional[str] = None, last_name: Optional[str] = None, **extra) -> str:
        payload = {
            'firstName': first_name or fake.first_name(),
            'lastName': last_name or fake.last_name(),
            'age': fake.random_int(min=18, max=70),
            **extra,
        }
        response = await client.post('/api/profiles', json=payload)
        assert response.status_code == 201, response.text
        return response.json()['profile']['id']
    return _make


@pytest.fixture
def make_room(client: AsyncClient) -> Callable:
    async def _make(max_capacity: int = 5, name: Optional[str] = None) -> str:
        payload = {
            'name': name or f'Room {fake.unique.bothify("??-###")}',
            'max_capacity': max_capacity,
        }
        response = await client.post('/api/rooms', json=payload)
        assert response.status_code == 201, response.text
        return response.json()['room']['id']
    return _make


@pytest.fixture
def make_group(client: AsyncClient, subject_ids: List[str]) -> Callable:
    async def _make(profile_ids: Optional[List[str]] = None, name: Optional[str] = None) -> str:
        payload = {
            'name': name or f'Group {fake.unique.bothify("??-###")}',
            'subjectIds': subject_ids[:1],
            'profileIds': profile_ids or [],
        }
        response = await client.post('/api/groups', json=payload)
        assert response.status_code == 201, response.text
        return response.json()['group']['id']
    return _make


@pytest.fixture
def seated_count(client: AsyncClient) -> Callable:
    """Current occupancy of a room as reported by the API"""
    async def _count(room_id: str) -> int:
        response = await client.get(f'/api/rooms/{room_id}')
        assert response.status_code == 200
        return response.json()['current_count']
    return _count


@pytest.fixture
def rival_session(db_session: AsyncSession) -> Callable:
    """Opens sessions on their own connection, outside the request session"""
    return TestSessionLocal

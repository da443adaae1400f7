"""
Test configuration and fixtures
"""
import os
from datetime import timedelta
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

# Set testing environment before the app reads its settings
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['BCRYPT_ROUNDS'] = '4'

from app.main import app
from app.api.deps import get_db, get_notification_dispatcher
from app.core.database import Base, enable_sqlite_foreign_keys
from app.core.datetime_utils import utcnow
from app.core.security import create_access_token, get_password_hash
from app.models import Destination, Traveler, TripRequest, User
from app.services.notifications import DatabaseNotificationDispatcher

fake = Faker()

PASSWORD = 'testpassword123'


@pytest.fixture
async def engine(tmp_path):
    """A fresh SQLite database per test"""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    enable_sqlite_foreign_keys(test_engine)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession, session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Test client sharing the test session; notifications go to the test database"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: DatabaseNotificationDispatcher(session_factory)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers_for(user: User) -> dict:
    token = create_access_token(user.id, user.is_admin)
    return {'Authorization': f'Bearer {token}'}


def future(days: int = 10, hours: int = 0):
    return utcnow() + timedelta(days=days, hours=hours)


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Create a user, by default with one active traveler profile"""
    async def _make(is_admin=False, with_traveler=True, traveler_active=True, name=None, email=None):
        name = name or fake.name()
        user = User(
            name=name,
            email=email or fake.unique.email(),
            hashed_password=get_password_hash(PASSWORD),
            is_admin=is_admin
        )
        db_session.add(user)
        if with_traveler:
            db_session.add(Traveler(name=name, user=user, is_active=traveler_active))
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def traveler_of(db_session: AsyncSession):
    """First traveler profile of a user"""
    async def _get(user: User) -> Traveler:
        from sqlalchemy import select
        result = await db_session.execute(
            select(Traveler).where(Traveler.user_id == user.id).order_by(Traveler.id)
        )
        return result.scalars().first()
    return _get


@pytest.fixture
def make_destination(db_session: AsyncSession):
    async def _make(city=None, state='SP', country='Brasil'):
        destination = Destination(city=city or fake.city(), state=state, country=country)
        db_session.add(destination)
        await db_session.commit()
        await db_session.refresh(destination)
        return destination
    return _make


@pytest.fixture
def make_trip_request(db_session: AsyncSession):
    """Insert a trip request directly, bypassing lifecycle rules"""
    async def _make(traveler: Traveler, destination: Destination, status='requested',
                    departure_at=None, return_at=None, description=None):
        departure_at = departure_at or future(10)
        trip_request = TripRequest(
            traveler_id=traveler.id,
            destination_id=destination.id,
            description=description,
            departure_at=departure_at,
            return_at=return_at or departure_at + timedelta(days=5),
            status=status
        )
        db_session.add(trip_request)
        await db_session.commit()
        await db_session.refresh(trip_request)
        return trip_request
    return _make


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(is_admin=True)


@pytest.fixture
async def regular_user(make_user) -> User:
    return await make_user()


@pytest.fixture
async def other_user(make_user) -> User:
    return await make_user()


@pytest.fixture
def headers_for():
    return auth_headers_for


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def user_headers(regular_user: User) -> dict:
    return auth_headers_for(regular_user)

"""
Centralized Test Configuration.
"""

import pytest
from datetime import date
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from hostel_backend.app.main import app
from hostel_backend.app.db.session import get_db, Base
from hostel_backend.app.core.jwt import create_access_token
from hostel_backend.app.models.enums import UserRole
from hostel_backend.app.models.student import Student
from hostel_backend.app.models.staff import Staff

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Session for fixture data creation and direct service calls."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Async client for testing, wired to the test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides = {}


def auth_headers(role: UserRole = UserRole.ADMIN, user_id: int = 1, **claims) -> dict:
    """Bearer header for a token carrying the given role and claims."""
    token = create_access_token(data={
        "sub": f"{role.value.lower()}_{user_id}",
        "user_id": user_id,
        "role": role.value,
        **claims
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return auth_headers(UserRole.ADMIN)


@pytest.fixture
async def student(db_session):
    """Student who joined on 2024-01-01 with a 15000 monthly fee on file."""
    record = Student(
        student_name="Asha Rai",
        room_no="A-101",
        monthly_fee=Decimal("15000.00"),
        joining_date=date(2024, 1, 1),
        is_active=True
    )
    db_session.add(record)
    await db_session.commit()
    await db_session.refresh(record)
    return record


@pytest.fixture
async def staff_member(db_session):
    """Staff member who joined on 2024-01-01 with a 3000 salary."""
    record = Staff(
        staff_name="Bikash Thapa",
        position="Warden",
        salary_amount=Decimal("3000.00"),
        joining_date=date(2024, 1, 1),
        is_active=True
    )
    db_session.add(record)
    await db_session.commit()
    await db_session.refresh(record)
    return record


@pytest.fixture
def make_headers():
    """Factory for bearer headers with custom role and resident claims."""
    return auth_headers

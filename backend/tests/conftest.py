"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets its own transaction that rolls back after the test.
- The database comes from ``TEST_DATABASE_URL``; by default an in-memory
  SQLite database (aiosqlite) is used so the suite runs without PostgreSQL.
  Point it at a PostgreSQL test database to exercise row locking too.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from stayfinder.auth.jwt import create_token_pair
from stayfinder.auth.passwords import hash_password
from stayfinder.database import Base, get_db
from stayfinder.main import app
from stayfinder.models.property import Property
from stayfinder.models.user import User

_test_db_url = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _make_engine():
    if _test_db_url.startswith("sqlite"):
        # One shared connection so every session sees the same in-memory DB.
        return create_async_engine(
            _test_db_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(_test_db_url, echo=False, pool_pre_ping=True)


def pytest_collection_modifyitems(items):
    """Run every async test in the session event loop shared with the engine."""
    session_loop = pytest.mark.asyncio(loop_scope="session")
    for item in items:
        if pytest_asyncio.is_async_test(item):
            item.add_marker(session_loop, append=False)


# ---------------------------------------------------------------------------
# Session-scoped: create / drop all tables once per test session
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_engine():
    """Create a session-scoped engine tied to the session event loop."""
    engine = _make_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def setup_test_db(test_engine):
    """Create all tables at the start of the session and drop them at the end."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Per-test: transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(loop_scope="session")
async def db_session(test_engine, setup_test_db) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


# ---------------------------------------------------------------------------
# Per-test: committing sessions, one per simulated request
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(loop_scope="session")
async def committed_sessions(tmp_path, setup_test_db) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Yield a session factory whose sessions each own a connection and commit.

    Used to race independent requests the way ``get_db`` runs them. The shared
    in-memory SQLite connection would let sessions see each other's
    uncommitted rows, so SQLite runs get a throwaway database file instead.
    Other backends use ``TEST_DATABASE_URL`` and have their tables emptied
    afterwards.
    """
    if _test_db_url.startswith("sqlite"):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'races.db'}", poolclass=NullPool)
        async with engine.connect() as conn:
            await conn.exec_driver_sql("PRAGMA journal_mode=WAL")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    else:
        engine = create_async_engine(_test_db_url, poolclass=NullPool)

    yield async_sessionmaker(engine, expire_on_commit=False)

    async with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            await conn.execute(table.delete())
    await engine.dispose()


@pytest.fixture
def make_committed_listing(committed_sessions):
    """Factory fixture: ``prop, guests = await make_committed_listing(guests=3)``."""

    async def _make(guests: int = 1) -> tuple[Property, list[User]]:
        async with committed_sessions() as session:
            host = await create_user(session, role="host", name="Race Host")
            prop = await create_property(session, host)
            people = [await create_user(session, name=f"Racer {i}") for i in range(guests)]
            await session.commit()
        return prop, people

    return _make


@pytest_asyncio.fixture(loop_scope="session")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


async def create_user(db: AsyncSession, role: str = "guest", name: str = "Test User") -> User:
    """Insert a user directly in the DB."""
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{role}-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name=name,
        phone="+15550000000",
        is_active=True,
        role=role,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def create_property(db: AsyncSession, host: User, **overrides) -> Property:
    """Insert a property directly in the DB (base 1000, week+ 800, 10% tax by default)."""
    values = {
        "title": "Seaside Cottage",
        "description": "Two bedrooms by the water.",
        "location": "Goa, India",
        "latitude": 15.2993,
        "longitude": 74.124,
        "base_rate": Decimal("1000"),
        "weekly_discount_rate": Decimal("800"),
        "tax_percent": Decimal("10"),
        "max_guests": 4,
        "amenities": ["wifi", "kitchen"],
        "cover_photo": "/uploads/cover.jpg",
        "images": [],
    }
    values.update(overrides)
    prop = Property(host_id=host.id, **values)
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return prop


def auth_headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(user.id, user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


# ---------------------------------------------------------------------------
# Convenience fixtures: users, headers, property
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(loop_scope="session")
async def host_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, role="host", name="Harriet Host")


@pytest_asyncio.fixture(loop_scope="session")
async def guest_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, role="guest", name="Gus Guest")


@pytest_asyncio.fixture(loop_scope="session")
async def other_guest(db_session: AsyncSession) -> User:
    return await create_user(db_session, role="guest", name="Olive Other")


@pytest.fixture
def host_headers(host_user: User) -> dict[str, str]:
    return auth_headers_for(host_user)


@pytest.fixture
def guest_headers(guest_user: User) -> dict[str, str]:
    return auth_headers_for(guest_user)


@pytest.fixture
def other_guest_headers(other_guest: User) -> dict[str, str]:
    return auth_headers_for(other_guest)


@pytest_asyncio.fixture(loop_scope="session")
async def test_property(db_session: AsyncSession, host_user: User) -> Property:
    return await create_property(db_session, host_user)


@pytest.fixture
def guest_details() -> dict:
    return {
        "name": "Gus Guest",
        "email": "gus@example.com",
        "phone": "+15551234567",
        "address": "1 Main St",
        "gov_id": "X1234567",
    }


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory fixture: ``await make_user(role="host")``."""

    async def _make(role: str = "guest", name: str = "Test User") -> User:
        return await create_user(db_session, role=role, name=name)

    return _make


@pytest.fixture
def make_property(db_session: AsyncSession):
    """Factory fixture: ``await make_property(host, base_rate=Decimal("500"))``."""

    async def _make(host: User, **overrides) -> Property:
        return await create_property(db_session, host, **overrides)

    return _make


@pytest.fixture
def headers_for():
    return auth_headers_for

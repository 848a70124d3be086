"""
Pytest fixtures for the test database, HTTP client, events and tokens.

Each test gets a freshly created schema. The default database is in-memory
SQLite; set TEST_DATABASE_URL to an asyncpg URL to run the same suite
against PostgreSQL (where the event row lock is a real FOR UPDATE).
Race tests use `concurrent_session_factory`, which gives every session its
own connection.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from eventgate.main import app
from eventgate.db.base import Base
from eventgate.db.session import get_db, serialize_sqlite_writers
from eventgate.core.security import create_access_token
from eventgate.models.event import Event

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # One shared connection so every session sees the same in-memory database
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {}


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables, yield a session factory, then drop tables for isolation."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_kwargs(TEST_DATABASE_URL))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def concurrent_session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """
    Session factory whose sessions each hold their own connection, for tests
    that race operations with asyncio.gather.

    The shared in-memory connection cannot host concurrent transactions, so
    SQLite runs use a database file with the same BEGIN IMMEDIATE setup as the
    application engine.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        url = f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}"
        engine = create_async_engine(url, poolclass=NullPool, connect_args={"timeout": 30})
        serialize_sqlite_writers(engine)
    else:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each get their own session on the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_event(db_session: AsyncSession):
    """Factory for events; defaults to an open, unlimited event 30 days out."""

    async def _make_event(
        capacity: Optional[int] = None,
        registration_type: str = "open",
        invite_code: Optional[str] = None,
        days_from_now: int = 30,
        timezone_name: Optional[str] = "UTC",
        title: str = "Test Workshop",
    ) -> Event:
        event = Event(
            title=title,
            description="A test event",
            date=datetime.now(timezone.utc).date() + timedelta(days=days_from_now),
            timezone=timezone_name,
            location="Room 101",
            capacity=capacity,
            registration_type=registration_type,
            invite_code=invite_code,
            organizer_id=1,
        )
        db_session.add(event)
        await db_session.commit()
        await db_session.refresh(event)
        return event

    return _make_event


@pytest.fixture
def auth_headers():
    """Authorization headers for a user id, optionally with the organizer role."""

    def _auth_headers(user_id: int, role: Optional[str] = None) -> dict:
        claims = {"sub": str(user_id)}
        if role:
            claims["role"] = role
        return {"Authorization": f"Bearer {create_access_token(data=claims)}"}

    return _auth_headers


@pytest.fixture
def organizer_headers(auth_headers) -> dict:
    return auth_headers(900, role="organizer")

"""
Async engine and session factory.

Services own their transactions (lock, decide, write, commit), so the request
dependency only scopes the session's lifetime.

SQLite has no row locks and pysqlite does not open a transaction for SELECTs,
so the event-row lock would not serialize a read-count-then-write sequence.
SQLite engines therefore begin every transaction with BEGIN IMMEDIATE, which
takes the database write lock before the first read.
"""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from eventgate.core.config import get_settings

settings = get_settings()


def serialize_sqlite_writers(async_engine: AsyncEngine) -> None:
    """Make each SQLite transaction hold the write lock from its first statement."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        # Stop pysqlite from emitting its own deferred BEGIN
        dbapi_connection.isolation_level = None

    @event.listens_for(async_engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = create_async_engine(
    settings.DATABASE_URL,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    pool_pre_ping=True,
)
if engine.dialect.name == "sqlite":
    serialize_sqlite_writers(engine)

# expire_on_commit=False keeps committed records readable when building responses
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session

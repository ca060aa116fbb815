"""
Database Engine Configuration for FastAPI.

SQLite (aiosqlite) is the default store; PostgreSQL (asyncpg) works through the
same URL switch. Every ledger mutation runs inside one unit of work opened with
atomic(), so draft, balance, ledger and inventory rows commit or roll back
together.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from bullion.core.config import config as settings


def _get_engine_options(database_url: str) -> dict:
    """
    Get engine options based on database type.
    SQLite requires special handling for async and concurrency.
    """
    is_sqlite = database_url.startswith("sqlite")

    options = {
        "echo": settings.db_echo,
        "future": True,
    }

    if is_sqlite:
        # StaticPool keeps a single connection alive so an in-memory
        # database survives between sessions
        if ":memory:" in database_url:
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        else:
            options["poolclass"] = NullPool
    elif not settings.is_production:
        options["poolclass"] = NullPool

    return options


def _configure_sqlite_connection(dbapi_connection, connection_record):
    """
    Configure SQLite connection on every new connection.

    - isolation_level=None: the driver stops issuing its own BEGIN, the
      "begin" listener below emits it instead. Without this SAVEPOINT
      (begin_nested) is unreliable on pysqlite/aiosqlite.
    - busy_timeout: wait up to 30s for the write lock
    - WAL mode: readers don't block the writer
    - foreign_keys: enforce referential integrity
    """
    dbapi_connection.isolation_level = None

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA cache_size=-64000")
    cursor.close()


def _begin_sqlite_transaction(conn):
    # IMMEDIATE takes the write lock up front so two units of work touching
    # the same party or stock are serialized by the database
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine_for(database_url: str) -> AsyncEngine:
    """Build an async engine, registering the SQLite listeners when needed."""
    new_engine = create_async_engine(database_url, **_get_engine_options(database_url))

    if database_url.startswith("sqlite"):
        event.listen(new_engine.sync_engine, "connect", _configure_sqlite_connection)
        event.listen(new_engine.sync_engine, "begin", _begin_sqlite_transaction)

    return new_engine


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,  # Manual control over flushing
    )


database_url = settings.database_url

engine = create_engine_for(database_url)

AsyncSessionLocal = create_session_factory(engine)


async def get_db_util() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency for FastAPI.

    Services that mutate ledger state open their own unit of work with
    atomic(); the commit here only covers plain master-data writes.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Unit of work boundary.

    Opens a real transaction when the session is idle (committed on exit),
    or a SAVEPOINT when the caller already holds one. Any exception rolls back
    every write made inside the block and propagates.
    """
    if db.in_transaction():
        async with db.begin_nested():
            yield db
    else:
        async with db.begin():
            yield db


async def check_database_connection() -> bool:
    """
    Verify database connection is working.
    Useful for health checks and startup validation.
    """
    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1
    except Exception:
        return False

"""
Alembic environment configuration with SQLite and PostgreSQL support.

Key features:
- Async migration support for both databases
- Batch mode for SQLite (required for ALTER TABLE operations)
- Database URL taken from DB_URL, falling back to the application default
"""

import asyncio
import os
from logging.config import fileConfig
from pathlib import Path
from sqlalchemy import pool, event
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context
from dotenv import load_dotenv

# Every model module, so autogenerate sees all tables
from bullion.core.db.all_models import Base

# Load environment variables from .env file
load_dotenv()

# this is the Alembic Config object
config = context.config

db_url = os.getenv("DB_URL")

# If no DB_URL, use the SQLite file the application defaults to
if not db_url:
    project_root = Path(__file__).resolve().parent.parent
    db_url = f"sqlite+aiosqlite:///{project_root}/data/bullion.db"
    (project_root / "data").mkdir(parents=True, exist_ok=True)

config.set_main_option("sqlalchemy.url", db_url)

is_sqlite = db_url.startswith("sqlite")

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure_sqlite_connection(dbapi_connection, connection_record):
    """Foreign keys on, same journal settings as the app."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.
    Generates SQL without connecting to the database.
    """
    url = config.get_main_option("sqlalchemy.url")

    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
        render_as_batch=is_sqlite,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        # SQLite cannot ALTER most things; batch mode recreates tables
        render_as_batch=is_sqlite,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """
    Run migrations in 'online' mode with async engine.
    Handles both SQLite (aiosqlite) and PostgreSQL (asyncpg).
    """
    url = config.get_main_option("sqlalchemy.url")
    if not url:
        raise RuntimeError("No database URL configured")

    connectable = create_async_engine(url, poolclass=pool.NullPool)

    if is_sqlite:
        @event.listens_for(connectable.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            _configure_sqlite_connection(dbapi_connection, connection_record)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

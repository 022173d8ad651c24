"""Database connection and storage utilities."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from reviewgate.core.config import settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url)


class Database:
    """Engine plus the session discipline every service goes through.

    The review flows assume a single connection on which statements never
    interleave. ``transaction()`` and ``session()`` both hold one asyncio lock
    for their whole duration, so a multi-statement flow cannot observe another
    handler's writes between its own steps.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Open a session inside a transaction that commits or rolls back as a unit."""
        async with self._lock:
            async with self.sessionmaker() as session:
                async with session.begin():
                    yield session

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session for reads."""
        async with self._lock:
            async with self.sessionmaker() as session:
                yield session

    async def init_models(self) -> None:
        """Create all tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


def _enable_sqlite_transactions(engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so transactions and savepoints are explicit."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_database(url: str, echo: bool = False) -> Database:
    """Build a Database for the given URL.

    In-memory SQLite gets a StaticPool so every session shares the one
    connection that holds the data.
    """
    if _is_memory_sqlite(url):
        engine = create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
    if url.startswith("sqlite"):
        _enable_sqlite_transactions(engine)
    return Database(engine)


database: Database = create_database(settings.database_url)


async def get_database() -> Database:
    """Dependency to get the process database."""
    return database

"""Async database engine and session management"""

from typing import AsyncIterator
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from wallet_gateway.config import settings
from wallet_gateway.infrastructure.database.models import Base


def _serialize_sqlite_writers(engine: AsyncEngine) -> None:
    """Start every SQLite transaction with BEGIN IMMEDIATE.

    The driver otherwise defers BEGIN until the first write, so two
    read-modify-write units could read the same balance before either
    writes.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """Create an async engine; pool sizing applies to server databases only"""
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(url, **kwargs)
        _serialize_sqlite_writers(engine)
        return engine

    # Connection pool: recycle after an hour to avoid stale connections
    kwargs.setdefault("pool_pre_ping", True)
    kwargs.setdefault("pool_size", settings.db_pool_size)
    kwargs.setdefault("max_overflow", settings.db_max_overflow)
    kwargs.setdefault("pool_recycle", settings.db_pool_recycle)
    return create_async_engine(url, **kwargs)


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Committed rows stay readable for response building
    return async_sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


engine = build_engine(settings.database_url)

SessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency injection for database sessions"""
    async with SessionLocal() as db:
        yield db


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create tables that do not exist yet"""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

"""
Armory API — Database Engine & Session Factory
================================================

What:  Builders for the async SQLAlchemy engine and session factory, plus the
       declarative Base shared by every resource model.
How:   The app factory builds one engine per application and hands its
       session factory to each ResourceGateway. Nothing here is created at
       import time, so tests can point the app at a throwaway SQLite file.

Connection Pooling:
    pool_size / max_overflow: from settings (PostgreSQL only)
    pool_pre_ping:            validates connections before use
    pool_recycle=3600:        recycles connections every hour

    SQLite (aiosqlite) ignores the pool options; SQLAlchemy picks a pool
    class suited to the file or in-memory database.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from armory.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all resource ORM models.

    Shares one metadata object, which Alembic and `create_schema` read to
    build the tables.
    """
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine (and its connection pool) for the configured URL.

    Pool arguments are only passed for server databases; SQLite's async
    driver rejects them.
    """
    url = settings.resolved_database_url
    kwargs = {
        # Echo SQL only in DEBUG mode
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory handed to every gateway.

    expire_on_commit=False keeps attribute values readable after commit, so a
    gateway can serialize the row it just wrote without another round-trip.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all resource tables that do not exist yet."""
    # Models register with Base.metadata on import
    import armory.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema ensured for tables: %s", ", ".join(sorted(Base.metadata.tables)))


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close every pooled connection. Called from the app's shutdown hook."""
    await engine.dispose()

"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

Nothing here is a module-level singleton: create_app() builds one engine
per app from its Settings and keeps it on the AppContext. get_db() pulls
the session factory off the request's app.
"""

from typing import AsyncIterator

import structlog
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tasktrack.config import Settings
from tasktrack.db.models import Base

logger = structlog.get_logger()


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for settings.database_url.

    Connection pool: 5 + 15 overflow on server databases. SQLite (tests,
    local runs) keeps SQLAlchemy's default pool. echo=True in debug.
    """
    kwargs = {"echo": settings.debug}
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(pool_size=5, max_overflow=15, pool_pre_ping=True)
    return create_async_engine(settings.database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory — each request gets its own session."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table from the ORM metadata (no-op for existing ones)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping(engine: AsyncEngine) -> bool:
    """Return True if the database answers a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("db.ping_failed", error=str(e))
        return False
    return True


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    factory = request.app.state.ctx.session_factory
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()

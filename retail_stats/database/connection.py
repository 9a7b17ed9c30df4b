"""
Database Engine and Session Scopes

One async engine per process, created at startup and disposed at shutdown.
Reports read through ``get_read_only_db``, whose transaction is always
rolled back. A report fetches all of its collections inside one such scope,
so they come from one transaction.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from retail_stats.config import get_settings

logger = structlog.get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_sessions: Optional[async_sessionmaker[AsyncSession]] = None


async def init_database(url: Optional[str] = None) -> AsyncEngine:
    """
    Create the engine and verify that the database answers.

    Args:
        url: Async database URL; defaults to the configured one

    Returns:
        AsyncEngine: The process-wide engine

    Raises:
        Exception: Whatever the driver raised while connecting
    """
    global _engine, _sessions

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    db_settings = get_settings().database
    target = url or db_settings.async_url
    # asyncpg keeps its own connections, so SQLAlchemy pooling is disabled
    _engine = create_async_engine(target, echo=db_settings.echo, poolclass=NullPool)
    _sessions = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(
            "Database unreachable",
            url=make_url(target).render_as_string(hide_password=True),
            error=str(e),
            error_type=type(e).__name__,
        )
        raise

    logger.info("Database engine ready", url=make_url(target).render_as_string(hide_password=True))
    return _engine


async def close_database() -> None:
    global _engine, _sessions

    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _sessions = None
    logger.info("Database engine disposed")


def _new_session() -> AsyncSession:
    if _sessions is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _sessions()


@asynccontextmanager
async def get_read_only_db() -> AsyncGenerator[AsyncSession, None]:
    """Report session whose transaction is never committed."""
    session = _new_session()
    try:
        yield session
    finally:
        await session.rollback()
        await session.close()


async def get_read_only_db_dependency() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one read-only session per request."""
    async with get_read_only_db() as session:
        yield session


async def check_database_health() -> dict:
    """Round-trip a trivial query and report its latency."""
    started = time.perf_counter()
    try:
        async with get_read_only_db() as db:
            await db.execute(text("SELECT 1"))
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "latency_ms": round((time.perf_counter() - started) * 1000, 2)}

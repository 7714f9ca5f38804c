"""Async SQLAlchemy engine and session management.

Supports PostgreSQL via asyncpg (production) and SQLite via aiosqlite
(development and tests).
"""
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import app_settings
from .logging import get_logger

logger = get_logger(__name__)

# Initialized on startup
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _redact(url: str) -> str:
    return url.split("@")[-1] if "@" in url else url


async def init_db(database_url: Optional[str] = None) -> None:
    """Create the engine and session factory, then create missing tables."""
    global _engine, _session_factory

    url = database_url or app_settings.database_url
    logger.info("database_initializing", url=_redact(url))

    connect_args: Dict[str, Any] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    _engine = create_async_engine(url, echo=app_settings.database_echo, connect_args=connect_args)
    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    from ..models import Base

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("database_initialized")


async def close_db() -> None:
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("database_closed")


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory


def use_session_factory(engine: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Install an externally built engine and session factory."""
    global _engine, _session_factory
    _engine = engine
    _session_factory = session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

"""
Async SQLAlchemy engine and session handling for the memory store.

DATABASE_URL is optional at import time: the engine is built on first use,
and a missing URL surfaces as ConfigError (HTTP 503) on the request that
needs it rather than at startup.
"""

import logging
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import get_settings
from .errors import ConfigError

logger = logging.getLogger(__name__)

ASYNC_DRIVER_PREFIXES = {
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


class Base(DeclarativeBase):
    """Declarative base for memories, resumes and events."""
    pass


_engine = None
_session_factory = None


def is_configured() -> bool:
    return bool(get_settings().database_url)


def async_url(url: str) -> str:
    """Swap plain driver schemes (as printed by hosting dashboards) for async ones."""
    for plain, driver in ASYNC_DRIVER_PREFIXES.items():
        if url.startswith(plain):
            return driver + url[len(plain):]
    return url


def get_engine():
    global _engine
    if _engine is not None:
        return _engine

    settings = get_settings()
    if not settings.database_url:
        raise ConfigError("Memory store not configured. Set DATABASE_URL.")

    url = async_url(settings.database_url)
    backend = url.split("+", 1)[0].split(":", 1)[0]
    options = {"echo": settings.debug}
    # Pool sizing only applies to server databases.
    if backend != "sqlite":
        options.update(pool_size=10, max_overflow=5, pool_pre_ping=True)

    _engine = create_async_engine(url, **options)
    logger.info("Memory store engine ready (%s)", backend)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def get_db() -> AsyncSession:
    """FastAPI dependency — one session per request, committed on success."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Create missing tables. Called on startup when DATABASE_URL is set."""
    from ..models import event, memory, resume  # noqa: F401  (registers tables)

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables verified: %s", ", ".join(sorted(Base.metadata.tables)))


async def close_db():
    """Dispose the engine on shutdown."""
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Memory store engine disposed")

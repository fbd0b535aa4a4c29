"""Async SQLAlchemy engine and session factory."""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rolegate_service.db.models import Base
from rolegate_service.settings import settings

log = structlog.get_logger(__name__)

_engine = None
_session_factory = None


async def init_db(database_url: str | None = None) -> None:
    global _engine, _session_factory
    url = database_url or settings.database_url
    kwargs = {} if url.startswith("sqlite") else {"pool_size": settings.database_pool_size}
    _engine = create_async_engine(url, echo=False, **kwargs)
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    log.info("db_initialized", dialect=_engine.dialect.name)


async def close_db() -> None:
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def create_tables() -> None:
    """Create missing tables from the ORM metadata."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("db_tables_created")


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory

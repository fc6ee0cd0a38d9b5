"""
FaceReader Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   The only persistent state is the dummy-mode switch and shared
       compatibility results; both go through this module.
When:  Engine is created at module import; sessions are created per-request.

Engines:
    PostgreSQL (asyncpg) in every deployed environment, pooled with
    pool_size / max_overflow from settings. SQLite (aiosqlite) is accepted
    for local tests and gets SQLAlchemy's default pool.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from facereader.config import settings

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if make_url(database_url).get_backend_name() == "sqlite":
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# expire_on_commit=False: share rows are serialized after the commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base; Alembic autogenerate reads Base.metadata."""


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request: commit on success, roll back and re-raise on
    error. Services only flush; the commit happens here.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ping() -> bool:
    """SELECT 1 against the pool; False (and a warning) when unreachable."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database ping failed: %s", str(e))
        return False
    return True


async def dispose_engine() -> None:
    await engine.dispose()

"""Async SQLAlchemy engine, session factory and declarative Base.

The engine is built lazily from Settings the first time a session is needed,
so importing models (Alembic, tests) never requires a database. Schema lives
in Alembic migrations under persistence/migrations.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import get_settings
from app.domain.exceptions import SqlNotConfiguredException

logger = logging.getLogger(__name__)

engine: AsyncEngine | None = None
_sessions: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Declarative base for every ORM model."""


def ensure_engine() -> None:
    """Build the engine and session factory once; no-op without DATABASE_URL."""
    global engine, _sessions
    if _sessions is not None:
        return
    settings = get_settings()
    if not settings.database_url:
        return
    connect_args: dict[str, Any] = {}
    if settings.database_url.startswith("postgresql+asyncpg"):
        connect_args["command_timeout"] = settings.db_command_timeout
    engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=3600,
        connect_args=connect_args,
    )
    _sessions = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory.

    Raises:
        SqlNotConfiguredException: DATABASE_URL is empty.
    """
    ensure_engine()
    if _sessions is None:
        logger.error("DATABASE_URL is not set; run alembic upgrade head once it is")
        raise SqlNotConfiguredException()
    return _sessions


async def get_db_transactional() -> AsyncIterator[AsyncSession]:
    """Request-scoped session inside one transaction.

    Commits when the endpoint returns and rolls back when it raises, so a
    task transition, its comments, its serial number and its audit row land
    together or not at all.
    """
    async with session_factory()() as session:
        async with session.begin():
            yield session

"""
Async database connection management for the DKA audit API.

Provides SQLAlchemy async engine and session factory creation and a
connectivity probe for the PostgreSQL backend. Engines are built from
an explicit ``Settings`` object so the API and the scripts can each
own their engine lifetime.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dka_common.config import Settings


def build_engine(settings: Settings, *, dsn: str | None = None) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Args:
        settings: Application settings supplying ``db_uri`` and ``db_pool_size``.
        dsn: Optional connection string overriding ``settings.db_uri``.

    Returns:
        A configured ``AsyncEngine`` instance.
    """
    return create_async_engine(
        dsn or settings.db_uri,
        pool_size=settings.db_pool_size,
        pool_pre_ping=True,
        echo=False,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to *engine*.

    Sessions keep attribute values after commit so records can be
    converted to Pydantic models once the transaction has ended.
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def check_database_health(session_factory: async_sessionmaker[AsyncSession]) -> bool:
    """Execute a lightweight query to verify database connectivity.

    Returns:
        ``True`` if the database responds, ``False`` otherwise.
    """
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception:  # noqa: BLE001 – health check must not raise
        return False

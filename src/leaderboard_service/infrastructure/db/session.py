"""Async SQLAlchemy engine and session factory helpers."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def create_engine(database_url: str) -> AsyncEngine:
    """Create the process-wide async engine for the provided database URL."""

    return create_async_engine(database_url)


def create_session_factory(
    database_url: str | None = None,
    *,
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create a reusable async session factory bound to one engine."""

    if engine is None:
        if database_url is None:
            raise ValueError("database_url or engine is required")
        engine = create_engine(database_url)
    return async_sessionmaker(engine, expire_on_commit=False)

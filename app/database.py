"""
Ideaji – Async SQLAlchemy engine, session factory, declarative base and
the dialect helpers used by the conditional-insert workflows.
"""

from __future__ import annotations

from typing import AsyncIterator

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


def build_engine(url: str) -> AsyncEngine:
    """Create the async engine for ``url`` with driver-specific tweaks."""
    kwargs = {"echo": settings.DEBUG and settings.ENVIRONMENT == "development"}

    # PgBouncer (transaction mode) does not support asyncpg's prepared
    # statement cache.
    if url.startswith("postgresql"):
        kwargs["connect_args"] = {"statement_cache_size": 0}

    return create_async_engine(url, **kwargs)


# ── Engine & session factory ──
engine = build_engine(settings.DATABASE_URL)

async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Declarative base ──
class Base(DeclarativeBase):
    """Base class for all ORM models."""

    # Fetch server-generated timestamps on flush; lazy refreshes are not
    # possible under asyncio.
    __mapper_args__ = {"eager_defaults": True}


async def create_all(bind: AsyncEngine = engine) -> None:
    """Create every table registered on ``Base.metadata``."""
    import app.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def insert_for(session: AsyncSession):
    """
    Return the dialect-specific ``insert`` construct for the session's bind.

    Both the SQLite and PostgreSQL variants expose ``on_conflict_do_nothing``,
    which the feedback upsert relies on.
    """
    if session.get_bind().dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert


# ── Dependency for FastAPI routes ──
async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield one session per request; commit on success, roll back on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

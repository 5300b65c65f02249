"""
Async database engine and session factory.

SQLAlchemy 2.0 async API. ``sqlite+aiosqlite`` is the zero-setup default;
``postgresql+asyncpg`` gets a sized connection pool.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from core.config import settings


def engine_options(database_url: str) -> dict[str, Any]:
    """Pool settings per backend. SQLite pools are chosen by the dialect."""
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"echo": False}
    return {"echo": False, "pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}


def build_engine(database_url: str | None = None) -> AsyncEngine:
    url = database_url or settings.database_url
    return create_async_engine(url, **engine_options(url))


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# ── Engine / Session Factory ──────────────────────────────────────────

engine = build_engine()
async_session_factory = build_session_factory(engine)


# ── Base Model ────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


async def init_models(target: AsyncEngine | None = None) -> None:
    """Create any missing tables on ``target`` (the app engine by default)."""
    import core.models  # noqa: F401  (registers the tables on Base.metadata)

    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Dependency (for FastAPI) ──────────────────────────────────────────

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields a database session."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

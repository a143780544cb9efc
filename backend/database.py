"""
Database connection for PostgreSQL with a local SQLite fallback.

Env vars (set in deployment variables or .env):
    DATABASE_URL  -- full postgres:// connection string
    DATABASE_URL_FALLBACK -- optional sqlite+aiosqlite:///./local.db for local dev
"""

from __future__ import annotations

import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

import config_env  # noqa: F401  (loads .env before DATABASE_URL is read)


def resolve_database_url(raw_url: str = "") -> str:
    """Turn a plain postgres:// URL into the asyncpg form, or fall back to SQLite."""
    if raw_url:
        # Hosting providers give postgres:// but asyncpg needs postgresql+asyncpg://
        if raw_url.startswith("postgres://"):
            return raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
        if raw_url.startswith("postgresql://"):
            return raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return raw_url
    return os.environ.get(
        "DATABASE_URL_FALLBACK", "sqlite+aiosqlite:///./local_locations.db"
    )


DATABASE_URL = resolve_database_url(os.environ.get("DATABASE_URL", ""))

engine = create_async_engine(DATABASE_URL, echo=False)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def init_db(bind: AsyncEngine | None = None):
    """Create all tables (safe to call multiple times)."""
    # models must be imported so their tables are registered on Base.metadata
    from backend import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

# sports/proxy/core/store/db.py
"""
Async SQLAlchemy plumbing for the per-domain entity stores.

Each domain may point at its own database (one SQLite file per sport in
development, a shared PostgreSQL schema in production); rows always carry
their ``domain`` so a shared database is safe too.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

# Deterministic constraint names for the entity tables
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Shared declarative base for the entity store tables."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def create_store_engine(database_url: str) -> AsyncEngine:
    """Create an async engine for a domain store.

    In-memory SQLite URLs share one connection so that the schema and seed
    data survive across sessions.
    """
    kwargs: dict[str, Any] = {"future": True}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    safe_url = database_url.split("@")[-1] if "@" in database_url else database_url
    logger.info("Creating store engine: %s", safe_url)
    return create_async_engine(database_url, **kwargs)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create the store tables if they do not exist."""
    # models must be imported so the tables are attached to Base.metadata
    from sports.proxy.core.store import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def session_scope(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Transactional scope for writes (seed loading).
    Request-time reads open plain sessions and never commit.
    """
    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("Store transaction rolled back")
            raise

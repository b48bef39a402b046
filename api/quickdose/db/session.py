from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from quickdose.core.config import get_settings
from quickdose.db.base import Base

_settings = get_settings()

_TRUTHY = {"1", "true", "yes", "on"}

def _is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY

def _adapt_url(raw_url: str) -> tuple[URL, dict[str, Any], dict[str, Any]]:
    """
    Return (async_url, connect_args, engine_kwargs) with the async driver set.
    Handles PostgreSQL and falls back to given URL for others.
    """
    url = make_url(raw_url)

    # PostgreSQL: asyncpg driver with a sized pool
    if url.get_backend_name() in {"postgresql", "postgres"}:
        query = dict(url.query)
        sslmode = query.pop("sslmode", None)
        pgbouncer = query.pop("pgbouncer", None)

        connect_args: dict[str, Any] = {}

        # Managed Postgres usually requires SSL. asyncpg needs ssl=True.
        if sslmode and sslmode.lower() in {"require", "verify-ca", "verify-full"}:
            connect_args["ssl"] = True

        # PgBouncer transaction pooling: disable prepared statements.
        if _is_truthy(pgbouncer):
            connect_args["statement_cache_size"] = 0

        engine_kwargs = {
            "pool_size": POOL_SIZE,
            "max_overflow": MAX_OVERFLOW,
            "pool_timeout": POOL_TIMEOUT,
            "pool_recycle": POOL_RECYCLE,
        }
        return url.set(drivername="postgresql+asyncpg", query=query), connect_args, engine_kwargs

    # SQLite or anything else: just reuse as-is
    return url, {}, {}

ECHO = _settings.environment == "development"
POOL_PRE_PING = True
POOL_SIZE = 10
MAX_OVERFLOW = 10
POOL_TIMEOUT = 30
POOL_RECYCLE = 1800  # Recycle connections after 30 min

_async_url, _connect_args, _engine_kwargs = _adapt_url(_settings.database_url)

_async_engine = create_async_engine(
    _async_url,
    echo=ECHO,
    connect_args=_connect_args,
    pool_pre_ping=POOL_PRE_PING,
    **_engine_kwargs,
)

_async_session_factory = async_sessionmaker(
    bind=_async_engine,
    expire_on_commit=False,
    autoflush=False,
)

# --- Plain "hand-me-a-session" dependency (caller manages commit/rollback) ---

@asynccontextmanager
async def get_async_session() -> AsyncIterator[AsyncSession]:
    async with _async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()

# --- Transactional helper (auto-commit / rollback) ---

@asynccontextmanager
async def async_transaction() -> AsyncIterator[AsyncSession]:
    async with _async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

async def init_models() -> None:
    """Create missing tables. Used by the seed script and local development."""
    async with _async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def dispose_engines() -> None:
    """Call on application shutdown to cleanly close pools."""
    await _async_engine.dispose()

__all__ = [
    "get_async_session",
    "async_transaction",
    "init_models",
    "dispose_engines",
]

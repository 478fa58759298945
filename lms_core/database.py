"""
Database engine for stored calls, users, notifications and report cards.

One async engine per process, created lazily from DATABASE_URL. The
repositories in store.py borrow a connection per operation: reads go through
get_connection, writes through get_transaction so they commit together or
not at all.
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from .config import get_database_url, get_pool_settings
from .tables import metadata  # noqa: F401 - exported for schema tooling

ASYNC_SCHEME = "postgresql+asyncpg://"

# Plain schemes hosting providers hand out; both mean PostgreSQL
PLAIN_SCHEMES = ("postgresql://", "postgres://")

_engine: AsyncEngine | None = None


def _get_database_url() -> str:
    """DATABASE_URL with the asyncpg driver filled in."""
    url = get_database_url()
    if not url:
        raise ValueError("DATABASE_URL environment variable must be set")

    for scheme in PLAIN_SCHEMES:
        if url.startswith(scheme):
            return ASYNC_SCHEME + url[len(scheme):]
    return url


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            _get_database_url(),
            echo=os.environ.get("SQL_ECHO", "").lower() == "true",
            **get_pool_settings(),
        )
    return _engine


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """
    Borrow a pooled connection for reads.

        async with get_connection() as conn:
            row = await get_call(conn, call_id)
    """
    async with get_engine().connect() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncConnection, None]:
    """Borrow a connection inside a transaction; rolled back if the block raises."""
    async with get_engine().begin() as conn:
        yield conn


async def close_engine() -> None:
    """Dispose of the pool, e.g. when the host process shuts down."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None

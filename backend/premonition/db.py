"""Postgres pool for the history store (asyncpg)."""

import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import asyncpg

from premonition.config import get_settings

logger = logging.getLogger(__name__)

# One pool per process; scripts open and close it around a run
_pool: asyncpg.Pool | None = None


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode jsonb columns (participant_score.team_scores) to Python objects."""
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


async def init_pool() -> asyncpg.Pool:
    """Open the pool for ``DATABASE_URL``. Idempotent."""
    global _pool
    if _pool is not None:
        return _pool

    dsn = get_settings().db_connection_string
    if not dsn:
        raise ValueError(
            "DATABASE_URL is not set. Configure it, or use STORAGE_BACKEND=file."
        )

    logger.info("Opening history store connection pool")
    _pool = await asyncpg.create_pool(
        dsn,
        min_size=1,
        max_size=5,  # a scheduled run and a few API readers
        command_timeout=30,
        init=_init_connection,
    )
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        logger.info("Closing history store connection pool")
        await _pool.close()
        _pool = None


def get_pool() -> asyncpg.Pool:
    """Current pool; raises RuntimeError before ``init_pool``."""
    if _pool is None:
        raise RuntimeError("History store pool not initialized. Call init_pool() first.")
    return _pool


@asynccontextmanager
async def get_connection() -> AsyncGenerator[asyncpg.Connection, None]:
    async with get_pool().acquire() as conn:
        yield conn

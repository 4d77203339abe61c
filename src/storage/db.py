"""
Database connection module for taskmind.

Owns the asyncpg pool used by the Postgres account and task stores.
When DATABASE_URL is unset the app runs on the in-memory stores instead
and this module is never initialised.
"""

import logging
import os
import pathlib
from contextlib import asynccontextmanager
from typing import Optional

import asyncpg

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
DB_POOL_MIN = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX = int(os.getenv("DB_POOL_MAX", "10"))

SCHEMA_PATH = pathlib.Path(__file__).parent / "schema.sql"

_pool: Optional[asyncpg.Pool] = None


async def init_db_pool(
    dsn: Optional[str] = None,
    min_size: int = DB_POOL_MIN,
    max_size: int = DB_POOL_MAX,
    command_timeout: float = 30.0,
) -> asyncpg.Pool:
    """Create the pool once; later calls return the existing one."""
    global _pool

    if _pool is not None:
        logger.warning("Database pool already initialized")
        return _pool

    dsn = dsn or DATABASE_URL
    if not dsn:
        raise RuntimeError("DATABASE_URL is not set")

    logger.info(f"Connecting to database (pool min={min_size}, max={max_size})")
    _pool = await asyncpg.create_pool(
        dsn,
        min_size=min_size,
        max_size=max_size,
        command_timeout=command_timeout,
    )
    return _pool


async def close_db_pool() -> None:
    global _pool

    if _pool is None:
        return

    logger.info("Closing database pool")
    await _pool.close()
    _pool = None


def get_pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_db_pool() first.")
    return _pool


@asynccontextmanager
async def get_connection():
    """
    Usage:
        async with get_connection() as conn:
            rows = await conn.fetch("SELECT * FROM tasks WHERE user_id = $1", uid)
    """
    async with get_pool().acquire() as connection:
        yield connection


async def execute(query: str, *args) -> str:
    async with get_connection() as conn:
        return await conn.execute(query, *args)


async def fetch(query: str, *args) -> list:
    async with get_connection() as conn:
        return await conn.fetch(query, *args)


async def fetchrow(query: str, *args):
    async with get_connection() as conn:
        return await conn.fetchrow(query, *args)


async def fetchval(query: str, *args):
    async with get_connection() as conn:
        return await conn.fetchval(query, *args)


async def init_schema() -> None:
    """Create the accounts and tasks tables if they do not exist yet."""
    logger.info(f"Applying database schema from {SCHEMA_PATH.name}")
    await execute(SCHEMA_PATH.read_text())


async def health_check() -> dict:
    try:
        await fetchval("SELECT 1")
        return {
            "status": "healthy",
            "database": "connected",
            "pool_size": _pool.get_size() if _pool else 0,
            "pool_free": _pool.get_idle_size() if _pool else 0,
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e),
        }

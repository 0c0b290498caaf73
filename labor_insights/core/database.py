"""
Async PostgreSQL connection pool module.

This module provides an async PostgreSQL connection pool using asyncpg. The
pool is the single shared mutable resource of the service: the rule engine
itself is stateless, and every generation pass reads its own snapshot of
observations through the pool.

Key Components:
- Global connection pool singleton (_pool)
- init_db(): Initialize the connection pool at application startup
- get_db_pool(): Get the pool instance (initializes if needed)
- close_db(): Gracefully close the pool at application shutdown
- init_schema(): Create the insights and data_points tables if missing

Connection Pool Configuration (from Settings):
- db_pool_min_size: minimum idle connections kept in pool (default 2)
- db_pool_max_size: maximum connections in pool (default 10)
- db_command_timeout: query timeout in seconds (default 60)

Usage:
    # At application startup (in FastAPI lifespan)
    await init_db()
    await init_schema()

    # In services or endpoints
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch("SELECT * FROM insights")

    # At application shutdown
    await close_db()
"""

import logging
from typing import Optional

import asyncpg
from asyncpg import Pool

from labor_insights.core.config import get_settings
from labor_insights.sql import SCHEMA_STATEMENTS

logger = logging.getLogger(__name__)


# Failures that mean the database could not serve a request. Repositories
# translate these into StoreUnavailable.
DATABASE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


# =============================================================================
# Global Pool Singleton
# =============================================================================

# None until init_db() is called
_pool: Optional[Pool] = None


# =============================================================================
# Pool Lifecycle Functions
# =============================================================================

async def init_db() -> Pool:
    """
    Initialize the database connection pool.

    Idempotent: if the pool already exists it is returned unchanged.

    Returns:
        Pool: The asyncpg connection pool instance.

    Raises:
        asyncpg.PostgresError: If connection to the database fails.
        OSError: If the database host is unreachable.
    """
    global _pool

    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )

    return _pool


async def get_db_pool() -> Pool:
    """
    Get the database connection pool, initializing if needed.

    Prefer calling init_db() explicitly at startup; lazy initialization adds
    latency to the first request.

    Returns:
        Pool: The asyncpg connection pool instance.
    """
    global _pool

    if _pool is None:
        await init_db()

    assert _pool is not None, "Pool should be initialized after init_db()"

    return _pool


async def close_db() -> None:
    """
    Close the database connection pool gracefully.

    Idempotent. After closing, get_db_pool() creates a new pool.
    """
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None


# =============================================================================
# Schema
# =============================================================================

async def init_schema(pool: Optional[Pool] = None) -> None:
    """
    Create the insights and data_points tables and their indexes if missing.

    Args:
        pool: Pool to use; defaults to the global pool.
    """
    pool = pool or await get_db_pool()

    async with pool.acquire() as conn:
        async with conn.transaction():
            for statement in SCHEMA_STATEMENTS:
                await conn.execute(statement)

    logger.info("Database schema ready")

"""asyncpg connection pool shared by the profile and transaction stores."""

import logging

import asyncpg

from config.settings import settings

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None


async def _init_connection(conn: asyncpg.Connection) -> None:
    # Transaction dates are compared as calendar days in UK tax years
    await conn.execute("SET TIME ZONE 'Europe/London'")


async def get_pool() -> asyncpg.Pool:
    """Get or create the connection pool."""
    global _pool
    if _pool is None:
        logger.info(
            "Creating connection pool (%d-%d connections)...",
            settings.db_pool_min_size,
            settings.db_pool_max_size,
        )
        _pool = await asyncpg.create_pool(
            settings.database_url_sync,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
            init=_init_connection,
        )
    return _pool


async def close_pool() -> None:
    """Close the connection pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None

"""
Database connection and pool management
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg

from config import settings
from rpc.errors import StoreConnectionError

logger = logging.getLogger(__name__)

# Global database pool, one per process
db_pool: Optional[asyncpg.Pool] = None

# Failures that mean the store could not be reached or talked to
CONNECTION_FAILURES = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.InterfaceError,
    asyncpg.PostgresConnectionError,
    asyncpg.CannotConnectNowError,
)


async def init_database():
    """Initialize database connection pool"""
    global db_pool
    if db_pool is not None:
        raise RuntimeError("Database pool already initialized")

    settings.validate_settings()
    try:
        db_pool = await asyncpg.create_pool(
            settings.DATABASE_URL,
            min_size=settings.DB_POOL_MIN_SIZE,
            max_size=settings.DB_POOL_MAX_SIZE,
            command_timeout=settings.DB_COMMAND_TIMEOUT,
            statement_cache_size=0  # pgbouncer compatibility
        )
    except CONNECTION_FAILURES as e:
        logger.error(f"Could not open database pool: {e}")
        raise StoreConnectionError("Database is unavailable") from e

    # Test connection; a pool that cannot answer is not kept
    try:
        async with acquire() as conn:
            await conn.fetchval("SELECT 1")
    except BaseException:
        await close_database()
        raise

    logger.info(
        f"Database initialized successfully (pool size {settings.DB_POOL_MIN_SIZE}-{settings.DB_POOL_MAX_SIZE})"
    )


async def close_database():
    """Close database connection pool"""
    global db_pool
    if db_pool is not None:
        await db_pool.close()
        db_pool = None
    logger.info("Database connections closed")


def get_db_pool() -> Optional[asyncpg.Pool]:
    """Get the database pool instance"""
    return db_pool


@asynccontextmanager
async def acquire(pool=None, timeout: Optional[float] = None) -> AsyncIterator[asyncpg.Connection]:
    """
    Borrow a connection from the pool and always give it back.

    Waiting longer than the acquire timeout, or any transport failure while the
    connection is held, is reported as StoreConnectionError.
    """
    pool = pool if pool is not None else db_pool
    if pool is None:
        raise StoreConnectionError("Database pool not initialized")

    timeout = settings.DB_ACQUIRE_TIMEOUT if timeout is None else timeout
    try:
        conn = await pool.acquire(timeout=timeout)
    except CONNECTION_FAILURES as e:
        logger.error(f"Failed to acquire database connection: {e!r}")
        raise StoreConnectionError("Database is unavailable") from e

    try:
        yield conn
    except CONNECTION_FAILURES as e:
        logger.error(f"Database connection failed: {e!r}")
        raise StoreConnectionError("Database is unavailable") from e
    finally:
        await pool.release(conn)

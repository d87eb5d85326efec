"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.
Uses psycopg2's ThreadedConnectionPool; repository calls run in worker threads.

psycopg2 is blocking, so async callers go through `run_in_db`, which
runs the repository call in a worker thread with a bounded timeout.
"""

import asyncio
from typing import Any, Callable

import psycopg2
from psycopg2 import pool
from config import DATABASE_URL, DB_POOL_SIZE, DB_TIMEOUT
from utils.logger import get_logger

logger = get_logger(__name__)

_pool: pool.ThreadedConnectionPool | None = None


def init_pool(min_conn: int = 1, max_conn: int = DB_POOL_SIZE) -> None:
    """
    Initialize the database connection pool.

    Args:
        min_conn: Minimum number of connections to keep open.
        max_conn: Maximum number of connections allowed.

    Raises:
        psycopg2.OperationalError: If the database is unreachable.
    """
    global _pool
    if _pool is not None:
        return
    timeout_ms = int(DB_TIMEOUT * 1000)
    try:
        _pool = pool.ThreadedConnectionPool(
            min_conn,
            max_conn,
            DATABASE_URL,
            connect_timeout=max(1, int(DB_TIMEOUT)),
            options=f"-c statement_timeout={timeout_ms}",
        )
        logger.info("Database connection pool initialized successfully.")
    except psycopg2.OperationalError as e:
        logger.error(f"Failed to initialize database pool: {e}")
        raise


def get_connection():
    """
    Get a connection from the pool.

    Returns:
        A psycopg2 connection object.

    Raises:
        RuntimeError: If the pool has not been initialized.
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    return _pool.getconn()


def release_connection(conn) -> None:
    """
    Return a connection back to the pool.

    Args:
        conn: The psycopg2 connection to release.
    """
    if _pool is not None:
        _pool.putconn(conn)


def close_pool() -> None:
    """Close all connections in the pool."""
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None
        logger.info("Database connection pool closed.")


async def run_in_db(func: Callable[..., Any], *args, timeout: float = DB_TIMEOUT) -> Any:
    """
    Run a blocking repository call off the event loop.

    Args:
        func: Repository method to call.
        *args: Positional arguments for ``func``.
        timeout: Seconds to wait before giving up.

    Raises:
        TimeoutError: If the call does not finish within ``timeout``.
    """
    return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout)

"""PostgreSQL connection pool using asyncpg.

The options target Supabase's transaction pooler (PgBouncer) reached from
Render:

- connect timeout of 60s, long enough for cold starts
- idle connections are never closed by the pool
- connections are recycled every 30 minutes
- no prepared-statement cache, PgBouncer in transaction mode cannot keep them
"""

import asyncio
from contextlib import asynccontextmanager
from functools import partial
from typing import Any, AsyncGenerator

import asyncpg
import structlog
from asyncpg import Pool
from asyncpg.connection import LoggedQuery

from team_db.config import Settings, settings

logger = structlog.get_logger()

_pool: Pool | None = None
_recycler: asyncio.Task[None] | None = None
_pool_lock = asyncio.Lock()


def build_pool_options(config: Settings) -> dict[str, Any]:
    """Keyword arguments for ``asyncpg.create_pool`` derived from settings."""
    return {
        "ssl": config.db_ssl_mode,
        "min_size": config.db_pool_min_size,
        "max_size": config.db_pool_max_size,
        "max_inactive_connection_lifetime": config.db_idle_timeout,
        "timeout": config.db_connect_timeout,
        "statement_cache_size": 0,
        "server_settings": {"application_name": config.db_application_name},
        "init": partial(_init_connection, debug=config.is_development),
        "setup": _setup_connection,
    }


async def get_db_pool() -> Pool:
    """Get or create the database connection pool."""
    global _pool, _recycler
    async with _pool_lock:
        if _pool is None:
            _pool = await asyncpg.create_pool(
                settings.database_url,
                **build_pool_options(settings),
            )
            if settings.db_max_lifetime > 0:
                _recycler = asyncio.create_task(
                    _recycle_connections(_pool, settings.db_max_lifetime),
                    name="db-connection-recycler",
                )
            logger.info(
                "Database pool created",
                max_size=settings.db_pool_max_size,
                application_name=settings.db_application_name,
            )
    return _pool


async def _init_connection(conn: asyncpg.Connection, *, debug: bool = False) -> None:
    """Initialize a new connection; log every statement in development."""
    if debug:
        conn.add_query_logger(_log_query)


async def _setup_connection(conn: asyncpg.Connection) -> None:
    """Attach the notice listener on every acquire."""
    # Listeners are cleared whenever the pool resets a released connection.
    conn.add_log_listener(_log_notice)


def _log_notice(conn: asyncpg.Connection, message: asyncpg.PostgresLogMessage) -> None:
    """Log a NOTICE/WARNING sent by the server."""
    logger.info("Database notice", message=message.message, severity=message.severity)


def _log_query(record: LoggedQuery) -> None:
    """Log an executed statement. Only attached in development."""
    logger.info(
        "Database query",
        query=record.query,
        elapsed=round(record.elapsed, 4),
        error=str(record.exception) if record.exception else None,
    )


async def _recycle_connections(pool: Pool, interval: float) -> None:
    """Replace pooled connections every ``interval`` seconds."""
    while True:
        await asyncio.sleep(interval)
        try:
            await pool.expire_connections()
        except Exception as e:
            logger.error("Database connection recycling failed", error=str(e))
            continue
        logger.debug("Database connections expired", max_lifetime=interval)


async def close_db_pool() -> None:
    """Close the database connection pool."""
    global _pool, _recycler
    if _recycler is not None:
        _recycler.cancel()
        try:
            await _recycler
        except asyncio.CancelledError:
            pass
        _recycler = None
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")


@asynccontextmanager
async def get_connection() -> AsyncGenerator[asyncpg.Connection, None]:
    """Get a database connection from the pool."""
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        yield conn

"""Periodic keep-alive query so the hosting platform does not drop idle connections."""

import asyncio

import structlog
from asyncpg import Pool

from team_db.config import Settings, settings

logger = structlog.get_logger()

KEEP_ALIVE_QUERY = "SELECT 1"

_task: asyncio.Task[None] | None = None


async def ping(pool: Pool) -> bool:
    """Run the keep-alive query once. Failures are logged, never raised."""
    try:
        await pool.fetchval(KEEP_ALIVE_QUERY)
    except Exception as e:
        logger.error("Database keep-alive failed", error=str(e))
        return False
    logger.info("Database keep-alive ping successful")
    return True


async def _run(pool: Pool, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        await ping(pool)


def start_keep_alive(pool: Pool, config: Settings = settings) -> asyncio.Task[None] | None:
    """
    Schedule the keep-alive loop.

    Only runs in production. Returns the running task, or None when disabled.
    """
    global _task
    if not config.is_production:
        logger.info("Database keep-alive disabled", environment=config.environment)
        return None

    if _task is None or _task.done():
        _task = asyncio.create_task(
            _run(pool, config.keep_alive_interval), name="db-keep-alive"
        )
        logger.info(
            "Database keep-alive enabled", interval_seconds=config.keep_alive_interval
        )
    return _task


async def stop_keep_alive() -> None:
    """Cancel the keep-alive loop if it is running."""
    global _task
    if _task is None:
        return
    _task.cancel()
    try:
        await _task
    except asyncio.CancelledError:
        pass
    _task = None
    logger.info("Database keep-alive stopped")

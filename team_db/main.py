"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException

from team_db.config import settings
from team_db.db import close_db_pool, get_db_pool, start_keep_alive, stop_keep_alive
from team_db.models import HealthResponse

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown events."""
    # Startup
    logger.info("Starting team-db service", environment=settings.environment)
    pool = await get_db_pool()
    start_keep_alive(pool)
    yield
    # Shutdown
    logger.info("Shutting down team-db service")
    await stop_keep_alive()
    await close_db_pool()


app = FastAPI(
    title="Team DB",
    description="Pooled PostgreSQL access behind the Supabase transaction pooler",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint. Runs a trivial query through the pool."""
    try:
        pool = await get_db_pool()
        await pool.fetchval("SELECT 1")
    except Exception as e:
        logger.error("Health check failed", error=str(e))
        raise HTTPException(status_code=503, detail="Database unavailable") from e
    return HealthResponse()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "team_db.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )

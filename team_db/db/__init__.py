"""Database connection pool and keep-alive."""

from team_db.db.keepalive import ping, start_keep_alive, stop_keep_alive
from team_db.db.postgres import build_pool_options, close_db_pool, get_connection, get_db_pool

__all__ = [
    "build_pool_options",
    "close_db_pool",
    "get_connection",
    "get_db_pool",
    "ping",
    "start_keep_alive",
    "stop_keep_alive",
]

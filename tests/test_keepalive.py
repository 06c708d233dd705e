"""Tests for the keep-alive loop."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest

from team_db.config import Settings
from team_db.db import keepalive
from team_db.db.keepalive import ping, start_keep_alive, stop_keep_alive


def make_settings(**overrides) -> Settings:
    values = {"database_url": "postgresql://u:p@db.supabase.co:6543/postgres"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def logger(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    mock = MagicMock()
    monkeypatch.setattr(keepalive, "logger", mock)
    return mock


class TestPing:
    """Tests for a single keep-alive query."""

    @pytest.mark.asyncio
    async def test_success(self, logger: MagicMock) -> None:
        pool = MagicMock(fetchval=AsyncMock(return_value=1))

        assert await ping(pool) is True

        pool.fetchval.assert_awaited_once_with("SELECT 1")
        logger.info.assert_called_once_with("Database keep-alive ping successful")

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, logger: MagicMock) -> None:
        pool = MagicMock(fetchval=AsyncMock(side_effect=ConnectionResetError("connection reset")))

        assert await ping(pool) is False

        logger.error.assert_called_once_with(
            "Database keep-alive failed", error="connection reset"
        )

    @pytest.mark.asyncio
    async def test_postgres_error_is_caught(self, logger: MagicMock) -> None:
        error = asyncpg.exceptions.ConnectionDoesNotExistError("connection was closed")
        pool = MagicMock(fetchval=AsyncMock(side_effect=error))

        assert await ping(pool) is False
        logger.error.assert_called_once()


class TestKeepAliveScheduling:
    """Tests for starting and stopping the keep-alive task."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("environment", ["development", "test", "staging"])
    async def test_not_scheduled_outside_production(
        self, environment: str, logger: MagicMock
    ) -> None:
        pool = MagicMock(fetchval=AsyncMock(return_value=1))

        task = start_keep_alive(pool, make_settings(environment=environment))

        assert task is None
        assert keepalive._task is None
        logger.info.assert_called_once_with(
            "Database keep-alive disabled", environment=environment
        )

    @pytest.mark.asyncio
    async def test_failures_do_not_stop_the_loop(self, logger: MagicMock) -> None:
        calls = 0

        async def flaky_fetchval(query: str) -> int:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise OSError("pooler unreachable")
            return 1

        pool = MagicMock(fetchval=flaky_fetchval)
        config = make_settings(environment="production", keep_alive_interval=0.01)

        task = start_keep_alive(pool, config)
        assert task is not None
        logger.info.assert_any_call("Database keep-alive enabled", interval_seconds=0.01)

        await asyncio.sleep(0.1)

        assert not task.done()
        assert calls >= 2
        logger.error.assert_called_once_with(
            "Database keep-alive failed", error="pooler unreachable"
        )
        logger.info.assert_any_call("Database keep-alive ping successful")

        await stop_keep_alive()
        assert task.cancelled()
        assert keepalive._task is None

    @pytest.mark.asyncio
    async def test_start_twice_returns_same_task(self, logger: MagicMock) -> None:
        pool = MagicMock(fetchval=AsyncMock(return_value=1))
        config = make_settings(environment="production")

        first = start_keep_alive(pool, config)
        second = start_keep_alive(pool, config)

        assert first is second
        await stop_keep_alive()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, logger: MagicMock) -> None:
        await stop_keep_alive()
        logger.info.assert_not_called()

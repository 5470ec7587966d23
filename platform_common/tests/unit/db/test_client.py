"""Unit tests for PGClient and new_client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from platform_common.db.errors import ConnectError
from platform_common.db.pg.client import PGClient, new_client, new_client_from_settings
from platform_common.db.pg.pg import PG
from platform_common.settings import Settings
from platform_common.tests.fixtures.doubles import FakePool


@pytest.fixture
def raw_pool():
    pool = MagicMock()
    pool.fetchval = AsyncMock(return_value=1)
    pool.close = AsyncMock()
    return pool


class TestNewClient:

    @pytest.mark.asyncio
    async def test_creates_pool_and_pings(self, ctx, raw_pool, mock_logger):
        create_pool = AsyncMock(return_value=raw_pool)
        with patch("platform_common.db.pg.client.asyncpg.create_pool", create_pool):
            client = await new_client(ctx, "postgresql://localhost/app", max_size=7, logger=mock_logger)

        create_pool.assert_awaited_once_with(
            "postgresql://localhost/app",
            min_size=5,
            max_size=7,
            command_timeout=60.0,
        )
        raw_pool.fetchval.assert_awaited_once()
        assert isinstance(client.db(), PG)
        mock_logger.info.assert_called_with("postgres_connected", min_size=5, max_size=7)

    @pytest.mark.asyncio
    async def test_context_deadline_bounds_connect(self, ctx, raw_pool):
        create_pool = AsyncMock(return_value=raw_pool)
        with patch("platform_common.db.pg.client.asyncpg.create_pool", create_pool):
            await new_client(ctx.with_timeout(10), "postgresql://localhost/app")

        timeout = create_pool.call_args.kwargs["timeout"]
        assert 0 < timeout <= 10

    @pytest.mark.asyncio
    async def test_pool_creation_failure(self, ctx):
        cause = OSError("connection refused")
        create_pool = AsyncMock(side_effect=cause)
        with patch("platform_common.db.pg.client.asyncpg.create_pool", create_pool):
            with pytest.raises(ConnectError, match="failed to connect to db: connection refused") as exc_info:
                await new_client(ctx, "postgresql://localhost/app")

        assert exc_info.value.__cause__ is cause

    @pytest.mark.asyncio
    async def test_ping_failure_closes_pool(self, ctx, raw_pool):
        raw_pool.fetchval.side_effect = OSError("timeout")
        create_pool = AsyncMock(return_value=raw_pool)
        with patch("platform_common.db.pg.client.asyncpg.create_pool", create_pool):
            with pytest.raises(ConnectError):
                await new_client(ctx, "postgresql://localhost/app")

        raw_pool.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_from_settings(self, ctx, raw_pool):
        settings = Settings(
            postgres_dsn="postgresql+asyncpg://u:p@db:5432/app",
            postgres_min_pool_size=1,
            postgres_max_pool_size=3,
            postgres_command_timeout=5.0,
        )
        create_pool = AsyncMock(return_value=raw_pool)
        with patch("platform_common.db.pg.client.asyncpg.create_pool", create_pool):
            await new_client_from_settings(ctx, settings)

        create_pool.assert_awaited_once_with(
            "postgresql://u:p@db:5432/app",
            min_size=1,
            max_size=3,
            command_timeout=5.0,
        )


class TestPGClient:

    @pytest.mark.asyncio
    async def test_db_accessor(self, mock_logger):
        db = PG(FakePool(), logger=mock_logger)
        client = PGClient(db, logger=mock_logger)

        assert client.db() is db

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, mock_logger):
        pool = FakePool()
        client = PGClient(PG(pool, logger=mock_logger), logger=mock_logger)

        await client.close()
        await client.close()

        assert pool.close_count == 1

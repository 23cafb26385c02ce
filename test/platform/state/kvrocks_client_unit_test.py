"""
Kvrocks client pooling

The pool is built from settings and the client pings once on startup; the
ping is patched so no server is needed.
"""

from unittest.mock import AsyncMock, patch

import pytest
from redis.asyncio import ConnectionPool as AsyncConnectionPool, Redis as AsyncRedis

from src.platform.config.core_setting import settings
from src.platform.state.kvrocks_client import KvrocksClient


@pytest.mark.unit
class TestKvrocksClient:
    @pytest.mark.asyncio
    async def test_initialize_builds_configured_pool(self) -> None:
        client = KvrocksClient()

        with patch.object(AsyncRedis, 'ping', new=AsyncMock(return_value=True)):
            redis_client = await client.initialize()

        try:
            assert client.get_client() is redis_client
            pool = redis_client.connection_pool
            assert isinstance(pool, AsyncConnectionPool)
            assert pool.max_connections == settings.KVROCKS_POOL_MAX_CONNECTIONS
            assert pool.connection_kwargs['socket_timeout'] == settings.KVROCKS_POOL_SOCKET_TIMEOUT
            assert (
                pool.connection_kwargs['socket_keepalive'] == settings.KVROCKS_POOL_SOCKET_KEEPALIVE
            )
        finally:
            await client.disconnect()

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self) -> None:
        client = KvrocksClient()
        ping = AsyncMock(return_value=True)

        with patch.object(AsyncRedis, 'ping', new=ping):
            first = await client.initialize()
            second = await client.initialize()

        try:
            assert first is second
            assert ping.await_count == 1
        finally:
            await client.disconnect()

    @pytest.mark.asyncio
    async def test_get_client_before_initialize(self) -> None:
        with pytest.raises(RuntimeError, match='not initialized'):
            KvrocksClient().get_client()

    @pytest.mark.asyncio
    async def test_disconnect_clears_client(self) -> None:
        client = KvrocksClient()
        with patch.object(AsyncRedis, 'ping', new=AsyncMock(return_value=True)):
            await client.initialize()

        await client.disconnect()

        with pytest.raises(RuntimeError):
            client.get_client()

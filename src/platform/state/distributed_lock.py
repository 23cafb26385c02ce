"""
Distributed Lock using Kvrocks (Redis)

Lease = SET key token NX PX ttl. Release is compare-and-delete in Lua so a
holder whose lease already lapsed can never delete the next holder's lease.
The token is returned to the caller instead of being kept on the instance,
so one lock object is safe to share between concurrent requests.
"""

from typing import Optional
from uuid import uuid4

from redis.exceptions import RedisError

from src.platform.logging.loguru_io import Logger
from src.platform.state.i_distributed_lock import IDistributedLock
from src.platform.state.kvrocks_client import kvrocks_client


RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class DistributedLock(IDistributedLock):
    @Logger.io
    async def acquire(self, *, key: str, ttl_ms: int) -> Optional[str]:
        """
        Try once to take the lease, never wait for contention.

        Returns:
            Fencing token if acquired, None if held by someone else or Kvrocks is unreachable
        """
        client = kvrocks_client.get_client()
        token = str(uuid4())

        try:
            result = await client.set(key, token, nx=True, px=ttl_ms)
        except RedisError as e:
            Logger.base.error(f'❌ [LOCK] Error acquiring lock {key}: {e}')
            return None

        if result:
            Logger.base.debug(f'🔒 [LOCK] Acquired lock: {key} (ttl={ttl_ms}ms)')
            return token

        Logger.base.debug(f'⏳ [LOCK] Failed to acquire lock: {key} (already locked)')
        return None

    @Logger.io
    async def release(self, *, key: str, token: str) -> bool:
        """
        Delete the lease only if it still carries our token.

        Returns:
            True if released, False on ownership mismatch, expiry or Kvrocks error
        """
        client = kvrocks_client.get_client()

        try:
            result = await client.eval(RELEASE_SCRIPT, 1, key, token)  # type: ignore[misc]
        except RedisError as e:
            Logger.base.error(f'❌ [LOCK] Error releasing lock {key}: {e}')
            return False

        if result:
            Logger.base.debug(f'🔓 [LOCK] Released lock: {key}')
            return True

        Logger.base.warning(f'⚠️ [LOCK] Lease {key} no longer ours (expired or taken over)')
        return False

"""
Expiration Job Queue Implementation

Storage Format:
    Key: scheduler:session_expiration
    Type: Sorted Set
    Member: payment session id
    Score: due time (epoch milliseconds)

Jobs are removed only by the reaper after they were handled, so a crash
between fetch and remove replays them (expire is idempotent).
"""

from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import kvrocks_client
from src.service.reservation.app.interface.i_expiration_job_queue import IExpirationJobQueue
from src.service.reservation.driven_adapter.state.key_str_generator import (
    make_expiration_queue_key,
)


class ExpirationJobQueueImpl(IExpirationJobQueue):
    @Logger.io
    async def schedule(self, *, session_id: str, due_at_ms: int) -> None:
        client = kvrocks_client.get_client()
        await client.zadd(make_expiration_queue_key(), {session_id: due_at_ms})
        Logger.base.debug(f'⏰ [SCHEDULER] Session {session_id} due at {due_at_ms}')

    @Logger.io
    async def get_due_session_ids(self, *, now_ms: int) -> list[str]:
        client = kvrocks_client.get_client()
        members = await client.zrangebyscore(make_expiration_queue_key(), 0, now_ms)
        return [m.decode() if isinstance(m, bytes) else m for m in members]

    @Logger.io
    async def remove(self, *, session_ids: list[str]) -> None:
        if not session_ids:
            return
        client = kvrocks_client.get_client()
        await client.zrem(make_expiration_queue_key(), *session_ids)

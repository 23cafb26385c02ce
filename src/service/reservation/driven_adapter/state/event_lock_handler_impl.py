from typing import Optional

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.state.i_distributed_lock import IDistributedLock
from src.service.reservation.app.interface.i_event_lock_handler import IEventLockHandler
from src.service.reservation.driven_adapter.state.key_str_generator import make_event_lock_key


class EventLockHandlerImpl(IEventLockHandler):
    """Per-event lease on top of the shared distributed lock"""

    def __init__(self, *, distributed_lock: IDistributedLock, ttl_ms: Optional[int] = None):
        self.distributed_lock = distributed_lock
        self.ttl_ms = ttl_ms or settings.LOCK_TTL_MS

    @Logger.io
    async def acquire(self, *, event_id: int) -> Optional[str]:
        return await self.distributed_lock.acquire(
            key=make_event_lock_key(event_id=event_id), ttl_ms=self.ttl_ms
        )

    @Logger.io
    async def release(self, *, event_id: int, token: str) -> bool:
        return await self.distributed_lock.release(
            key=make_event_lock_key(event_id=event_id), token=token
        )

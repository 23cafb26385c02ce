from abc import ABC, abstractmethod
from typing import Optional


class IEventLockHandler(ABC):
    """Per-event advisory lease that cuts contention before expensive calls"""

    @abstractmethod
    async def acquire(self, *, event_id: int) -> Optional[str]:
        """Fail fast: return a fencing token, or None if the lease is held/unavailable"""
        pass

    @abstractmethod
    async def release(self, *, event_id: int, token: str) -> bool:
        pass

from abc import ABC, abstractmethod
from typing import Optional

from src.service.reservation.domain.entity.event_entity import Event


class IEventCacheHandler(ABC):
    """
    Read-through snapshot cache for events.

    Best-effort: implementations swallow and log their own backend errors,
    a miss is always a safe answer.
    """

    @abstractmethod
    async def get(self, *, event_id: int) -> Optional[Event]:
        """Return the cached snapshot and slide its TTL, or None on miss"""
        pass

    @abstractmethod
    async def set(self, *, event: Event) -> None:
        pass

    @abstractmethod
    async def get_version(self, *, event_id: int) -> Optional[int]:
        """Invalidation counter to pass to fill(); None when it cannot be read"""
        pass

    @abstractmethod
    async def fill(self, *, event: Event, version: int) -> bool:
        """Write the snapshot only if no invalidation happened since get_version()"""
        pass

    @abstractmethod
    async def invalidate(self, *, event_id: int) -> None:
        pass

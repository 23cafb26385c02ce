from abc import ABC, abstractmethod
from typing import Optional

from src.service.reservation.domain.entity.attendee_entity import Attendee


class IAttendeeRepo(ABC):
    """Attendee records keyed by (event_id, buyer_id)"""

    @abstractmethod
    async def get(self, *, event_id: int, buyer_id: str) -> Optional[Attendee]:
        pass

    @abstractmethod
    async def exists(self, *, event_id: int, buyer_id: str) -> bool:
        pass

    @abstractmethod
    async def upsert(self, *, attendee: Attendee) -> None:
        """Create, or merge into the existing record for the same (event_id, buyer_id)"""
        pass

    @abstractmethod
    async def delete(self, *, event_id: int, buyer_id: str) -> None:
        pass

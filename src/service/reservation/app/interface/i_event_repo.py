from abc import ABC, abstractmethod
from typing import Optional

from src.service.reservation.domain.entity.event_entity import Event


class IEventRepo(ABC):
    """Event rows in the authoritative store. Used through a unit of work."""

    @abstractmethod
    async def create(self, *, event: Event) -> Event:
        """Insert the event and return it with its id"""
        pass

    @abstractmethod
    async def get_by_id(self, *, event_id: int, for_update: bool = False) -> Optional[Event]:
        """
        Read the live event row.

        Args:
            for_update: take a row lock held until the transaction ends, every
                capacity-changing transaction does this first
        """
        pass

    @abstractmethod
    async def update_available_seats(self, *, event_id: int, available_seats: int) -> None:
        pass

from abc import ABC, abstractmethod
from typing import Optional

from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus


class IOrderRepo(ABC):
    @abstractmethod
    async def create(self, *, order: Order) -> Order:
        pass

    @abstractmethod
    async def get_by_id(self, *, order_id: str, for_update: bool = False) -> Optional[Order]:
        pass

    @abstractmethod
    async def update_status(
        self, *, order_id: str, status: OrderStatus, error: Optional[str] = None
    ) -> None:
        pass

    @abstractmethod
    async def set_payment_session(self, *, order_id: str, payment_session_id: str) -> None:
        pass

    @abstractmethod
    async def mark_seats_held(self, *, order_id: str) -> None:
        """Must run in the transaction that decrements the event's seats"""
        pass

from datetime import datetime, timezone
from typing import Optional

import attrs
import uuid_utils

from src.service.reservation.domain.enum.order_status import (
    CANCELLABLE_STATUSES,
    RELEASED_STATUSES,
    OrderStatus,
)


@attrs.define
class Order:
    """A buyer's attempt to take `quantity` seats of an event. Never deleted."""

    id: str
    event_id: int
    buyer_id: str
    quantity: int
    amount: int
    status: OrderStatus = OrderStatus.PENDING
    payment_session_id: Optional[str] = None
    error: Optional[str] = None
    seats_held: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create_pending(cls, *, event_id: int, buyer_id: str, quantity: int, amount: int) -> 'Order':
        now = datetime.now(timezone.utc)
        return cls(
            id=str(uuid_utils.uuid7()),
            event_id=event_id,
            buyer_id=buyer_id,
            quantity=quantity,
            amount=amount,
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_released(self) -> bool:
        return self.status in RELEASED_STATUSES

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    @property
    def holds_seats(self) -> bool:
        # seats_held is written by the decrement transaction itself
        return self.seats_held and self.status in (
            OrderStatus.PENDING,
            OrderStatus.PAID,
            OrderStatus.CONFIRMED,
        )

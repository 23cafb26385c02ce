"""
Event entity - the finite-capacity resource being sold.

[Business Invariants]
- 0 <= available_seats <= total_seats
- available_seats only moves through hold_seats / release_seats, and only
  inside an authoritative store transaction
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import attrs

from src.platform.exception.exceptions import ConflictError, DomainError
from src.platform.logging.loguru_io import Logger
from src.service.reservation.domain.enum.event_type import EventType


def _validate_non_empty_string(instance: object, attribute: attrs.Attribute, value: str) -> None:
    if not value or not value.strip():
        raise DomainError(f'Event {attribute.name} cannot be empty')


@attrs.define
class Event:
    name: str = attrs.field(validator=_validate_non_empty_string)
    description: str
    location: str
    event_type: EventType = attrs.field(converter=EventType)
    price: int
    total_seats: int
    available_seats: int
    owner_id: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        name: str,
        description: str,
        location: str,
        event_type: str,
        price: int,
        total_seats: int,
        owner_id: str,
    ) -> 'Event':
        if event_type not in EventType._value2member_map_:
            raise DomainError(f'Invalid event type: {event_type}')
        if price < 0:
            raise DomainError('Price cannot be negative')
        if total_seats < 1:
            raise DomainError('Event must have at least 1 seat')

        return cls(
            name=name,
            description=description,
            location=location,
            event_type=EventType(event_type),
            price=price,
            total_seats=total_seats,
            available_seats=total_seats,
            owner_id=owner_id,
            created_at=datetime.now(timezone.utc),
        )

    @property
    def is_free(self) -> bool:
        return self.price == 0

    def amount_for(self, quantity: int) -> int:
        return self.price * quantity

    def hold_seats(self, quantity: int) -> None:
        """Take `quantity` seats; the availability check and the decrement are one step"""
        if self.available_seats < quantity:
            raise ConflictError('Sold Out')
        self.available_seats -= quantity

    def release_seats(self, quantity: int) -> None:
        """Give `quantity` seats back, never above capacity"""
        credited = self.available_seats + quantity
        if credited > self.total_seats:
            Logger.base.error(
                f'🚨 [SEATS] Credit of {quantity} would exceed capacity for event {self.id} '
                f'({self.available_seats}/{self.total_seats}), clamping'
            )
            credited = self.total_seats
        self.available_seats = credited

    def to_snapshot(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'location': self.location,
            'event_type': self.event_type.value,
            'price': self.price,
            'total_seats': self.total_seats,
            'available_seats': self.available_seats,
            'owner_id': self.owner_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_snapshot(cls, snapshot: Dict[str, Any]) -> 'Event':
        created_at = snapshot.get('created_at')
        return cls(
            id=snapshot['id'],
            name=snapshot['name'],
            description=snapshot.get('description', ''),
            location=snapshot.get('location', ''),
            event_type=snapshot.get('event_type', EventType.OTHER),
            price=int(snapshot['price']),
            total_seats=int(snapshot['total_seats']),
            available_seats=int(snapshot['available_seats']),
            owner_id=snapshot['owner_id'],
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )

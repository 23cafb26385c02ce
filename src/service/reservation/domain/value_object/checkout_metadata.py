"""
Checkout Metadata - correlation payload carried through the payment gateway.

Gateways hand metadata back as an untyped string map; this pins it to a
fixed shape and refuses to build one when the identifying keys are missing.
"""

from typing import Any, Mapping, Optional

import attrs


@attrs.frozen
class CheckoutMetadata:
    event_id: int
    buyer_id: str
    quantity: int = 1
    order_id: Optional[str] = None

    def to_metadata(self) -> dict[str, str]:
        metadata = {
            'eventId': str(self.event_id),
            'userId': self.buyer_id,
            'quantity': str(self.quantity),
        }
        if self.order_id:
            metadata['orderId'] = self.order_id
        return metadata

    @classmethod
    def from_metadata(cls, metadata: Optional[Mapping[str, Any]]) -> Optional['CheckoutMetadata']:
        """Returns None when eventId/userId are absent or any field is malformed"""
        if not metadata:
            return None

        event_id = metadata.get('eventId')
        buyer_id = metadata.get('userId')
        if not event_id or not buyer_id:
            return None

        raw_quantity = metadata.get('quantity')
        try:
            quantity = int(raw_quantity) if raw_quantity else 1
            parsed_event_id = int(event_id)
        except (TypeError, ValueError):
            return None
        if quantity < 1:
            return None

        return cls(
            event_id=parsed_event_id,
            buyer_id=str(buyer_id),
            quantity=quantity,
            order_id=metadata.get('orderId') or None,
        )

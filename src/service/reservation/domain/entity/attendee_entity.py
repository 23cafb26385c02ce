from datetime import datetime, timezone
from typing import Optional

import attrs


@attrs.define
class Attendee:
    """Proof that a buyer secured a place. One per (event_id, buyer_id)."""

    event_id: int
    buyer_id: str
    order_id: Optional[str] = None
    email: Optional[str] = None
    payment_event_id: Optional[str] = None
    joined_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))

from enum import StrEnum


class OrderStatus(StrEnum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'  # free event, attendance granted at reserve time
    PAID = 'paid'
    EXPIRED = 'expired'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


# Seat already credited back (or never held and closed by the buyer)
RELEASED_STATUSES = frozenset({OrderStatus.EXPIRED, OrderStatus.CANCELLED})

# Buyer may still cancel
CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.FAILED})

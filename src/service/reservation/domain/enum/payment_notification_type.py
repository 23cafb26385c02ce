from enum import StrEnum


class PaymentNotificationType(StrEnum):
    """Stripe checkout webhook types the engine reacts to"""

    SESSION_COMPLETED = 'checkout.session.completed'
    SESSION_EXPIRED = 'checkout.session.expired'
    ASYNC_PAYMENT_FAILED = 'checkout.session.async_payment_failed'


class LedgerEntryType(StrEnum):
    CONFIRM_SEAT = 'confirm_seat'
    RELEASE_SEAT = 'release_seat'

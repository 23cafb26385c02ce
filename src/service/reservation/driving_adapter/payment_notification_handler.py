"""
Payment Notification Handler - gateway webhook dispatch

Receives an already signature-verified Stripe event (the HTTP layer owns
verification) and routes it by type:
    - checkout.session.completed             -> ConfirmSeatUseCase
    - checkout.session.expired               -> ReleaseSeatUseCase
    - checkout.session.async_payment_failed  -> ReleaseSeatUseCase

Every notification is acknowledged; the use cases are idempotent on the
event id and swallow their own failures.
"""

from typing import Any, Mapping, Optional

from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.command.confirm_seat_use_case import ConfirmSeatUseCase
from src.service.reservation.app.command.release_seat_use_case import ReleaseSeatUseCase
from src.service.reservation.domain.enum.payment_notification_type import (
    PaymentNotificationType,
)
from src.service.reservation.domain.value_object.checkout_metadata import CheckoutMetadata


ACK = {'received': True}

RELEASE_TYPES = {
    PaymentNotificationType.SESSION_EXPIRED,
    PaymentNotificationType.ASYNC_PAYMENT_FAILED,
}


class PaymentNotificationHandler:
    def __init__(
        self,
        *,
        confirm_seat_use_case: ConfirmSeatUseCase,
        release_seat_use_case: ReleaseSeatUseCase,
    ) -> None:
        self.confirm_seat_use_case = confirm_seat_use_case
        self.release_seat_use_case = release_seat_use_case

    @Logger.io
    async def handle(self, notification: Mapping[str, Any]) -> dict[str, bool]:
        notification_id: Optional[str] = notification.get('id')
        notification_type: str = notification.get('type') or ''
        session: Mapping[str, Any] = (notification.get('data') or {}).get('object') or {}

        metadata = CheckoutMetadata.from_metadata(session.get('metadata'))
        if metadata is None:
            if notification_type.startswith('checkout.session'):
                Logger.base.warning(f'⚠️ [WEBHOOK] {notification_id} missing metadata, ignored')
            return ACK

        if not notification_id:
            Logger.base.warning(f'⚠️ [WEBHOOK] {notification_type} without id, ignored')
            return ACK

        if notification_type == PaymentNotificationType.SESSION_COMPLETED:
            customer_details = session.get('customer_details') or {}
            await self.confirm_seat_use_case.execute(
                event_id=metadata.event_id,
                buyer_id=metadata.buyer_id,
                notification_id=notification_id,
                quantity=metadata.quantity,
                order_id=metadata.order_id,
                buyer_email=customer_details.get('email') or session.get('customer_email'),
            )
        elif notification_type in RELEASE_TYPES:
            await self.release_seat_use_case.execute(
                event_id=metadata.event_id,
                notification_id=notification_id,
                quantity=metadata.quantity,
                order_id=metadata.order_id,
            )
        else:
            Logger.base.debug(f'📨 [WEBHOOK] {notification_type} not handled')

        return ACK

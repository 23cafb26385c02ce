"""
Confirm Seat Use Case - payment succeeded

Finalizes attendance only; the seats were already taken at reserve time.
Idempotent on the notification id: the ledger entry is written in the same
transaction as the attendee record, so a redelivered notification is a no-op.
Failures are logged and swallowed; a retry of the same notification is safe.
"""

from typing import Callable, Optional

from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface import IEventCacheHandler, IEventLockHandler
from src.service.reservation.domain.entity.attendee_entity import Attendee
from src.service.reservation.domain.enum.order_status import OrderStatus
from src.service.reservation.domain.enum.payment_notification_type import LedgerEntryType


class ConfirmSeatUseCase:
    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        event_cache_handler: IEventCacheHandler,
        event_lock_handler: IEventLockHandler,
    ) -> None:
        self.uow_factory = uow_factory
        self.event_cache_handler = event_cache_handler
        self.event_lock_handler = event_lock_handler
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def execute(
        self,
        *,
        event_id: int,
        buyer_id: str,
        notification_id: str,
        quantity: int,
        order_id: Optional[str] = None,
        buyer_email: Optional[str] = None,
    ) -> None:
        with self.tracer.start_as_current_span(
            'use_case.confirm_seat',
            attributes={'event.id': event_id, 'buyer.id': buyer_id, 'notification.id': notification_id},
        ):
            # Serialization only, the ledger transaction is what makes this safe
            token = await self.event_lock_handler.acquire(event_id=event_id)
            if token is None:
                Logger.base.warning(f'⏳ [CONFIRM] Lease for event {event_id} not acquired, proceeding')

            try:
                changed = await self._apply(
                    event_id=event_id,
                    buyer_id=buyer_id,
                    notification_id=notification_id,
                    quantity=quantity,
                    order_id=order_id,
                    buyer_email=buyer_email,
                )
                if changed:
                    await self.event_cache_handler.invalidate(event_id=event_id)
            except Exception as e:
                Logger.base.exception(
                    f'❌ [CONFIRM] Failed to confirm seat for buyer {buyer_id} '
                    f'on event {event_id} ({notification_id}): {e}'
                )
            finally:
                if token is not None:
                    await self.event_lock_handler.release(event_id=event_id, token=token)

    async def _apply(
        self,
        *,
        event_id: int,
        buyer_id: str,
        notification_id: str,
        quantity: int,
        order_id: Optional[str],
        buyer_email: Optional[str],
    ) -> bool:
        async with self.uow_factory() as uow:
            event = await uow.event_repo.get_by_id(event_id=event_id, for_update=True)
            if event is None:
                Logger.base.warning(f'⚠️ [CONFIRM] Event {event_id} not found, ignoring')
                return False

            if await uow.notification_ledger_repo.exists(notification_id=notification_id):
                Logger.base.info(f'🔁 [CONFIRM] Notification {notification_id} already processed')
                return False

            order = None
            if order_id:
                order = await uow.order_repo.get_by_id(order_id=order_id, for_update=True)
                if order is None:
                    Logger.base.warning(f'⚠️ [CONFIRM] Order {order_id} not found')

            if order is not None and not order.holds_seats:
                await uow.notification_ledger_repo.record(
                    notification_id=notification_id,
                    entry_type=LedgerEntryType.CONFIRM_SEAT,
                    quantity=quantity,
                )
                await uow.commit()
                Logger.base.error(
                    f'🚨 [CONFIRM] Payment {notification_id} completed for order {order.id} '
                    f'already {order.status}, seats were not held: refund manually'
                )
                return False

            await uow.attendee_repo.upsert(
                attendee=Attendee(
                    event_id=event_id,
                    buyer_id=buyer_id,
                    order_id=order.id if order else order_id,
                    email=buyer_email,
                    payment_event_id=notification_id,
                )
            )
            await uow.notification_ledger_repo.record(
                notification_id=notification_id,
                entry_type=LedgerEntryType.CONFIRM_SEAT,
                quantity=quantity,
            )
            if order is not None:
                await uow.order_repo.update_status(order_id=order.id, status=OrderStatus.PAID)
            await uow.commit()

        Logger.base.info(f'🎉 [CONFIRM] Buyer {buyer_id} joined event {event_id} ({quantity} seat(s))')
        return True

"""
Release Seat Use Case - payment expired or failed

Credits the held seats back exactly once. The order status is checked inside
the same transaction that would credit the seats, so a manual cancel that
already reconciled the order turns this into a ledger-only write.
"""

from typing import Callable, Optional

from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface import IEventCacheHandler, IEventLockHandler
from src.service.reservation.domain.enum.order_status import OrderStatus
from src.service.reservation.domain.enum.payment_notification_type import LedgerEntryType


class ReleaseSeatUseCase:
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
        notification_id: str,
        quantity: int,
        order_id: Optional[str] = None,
    ) -> None:
        with self.tracer.start_as_current_span(
            'use_case.release_seat',
            attributes={'event.id': event_id, 'notification.id': notification_id},
        ):
            token = await self.event_lock_handler.acquire(event_id=event_id)
            if token is None:
                Logger.base.warning(f'⏳ [RELEASE] Lease for event {event_id} not acquired, proceeding')

            try:
                changed = await self._apply(
                    event_id=event_id,
                    notification_id=notification_id,
                    quantity=quantity,
                    order_id=order_id,
                )
                if changed:
                    await self.event_cache_handler.invalidate(event_id=event_id)
            except Exception as e:
                Logger.base.exception(
                    f'❌ [RELEASE] Failed to release seats of event {event_id} '
                    f'({notification_id}): {e}'
                )
            finally:
                if token is not None:
                    await self.event_lock_handler.release(event_id=event_id, token=token)

    async def _apply(
        self,
        *,
        event_id: int,
        notification_id: str,
        quantity: int,
        order_id: Optional[str],
    ) -> bool:
        async with self.uow_factory() as uow:
            event = await uow.event_repo.get_by_id(event_id=event_id, for_update=True)
            if event is None:
                Logger.base.warning(f'⚠️ [RELEASE] Event {event_id} not found, ignoring')
                return False

            if await uow.notification_ledger_repo.exists(notification_id=notification_id):
                Logger.base.info(f'🔁 [RELEASE] Notification {notification_id} already processed')
                return False

            order = None
            if order_id:
                order = await uow.order_repo.get_by_id(order_id=order_id, for_update=True)
                if order is None:
                    Logger.base.warning(f'⚠️ [RELEASE] Order {order_id} not found')

            if order is not None and not order.holds_seats:
                # Cancelled/expired by another path, or never held seats
                await uow.notification_ledger_repo.record(
                    notification_id=notification_id,
                    entry_type=LedgerEntryType.RELEASE_SEAT,
                    quantity=quantity,
                )
                await uow.commit()
                Logger.base.info(
                    f'⏭️ [RELEASE] Order {order.id} already {order.status}, no seats credited'
                )
                return False

            credited = order.quantity if order is not None else quantity
            event.release_seats(credited)
            await uow.event_repo.update_available_seats(
                event_id=event_id, available_seats=event.available_seats
            )

            if order is not None:
                if order.status == OrderStatus.PAID:
                    await uow.attendee_repo.delete(event_id=event_id, buyer_id=order.buyer_id)
                await uow.order_repo.update_status(order_id=order.id, status=OrderStatus.EXPIRED)

            await uow.notification_ledger_repo.record(
                notification_id=notification_id,
                entry_type=LedgerEntryType.RELEASE_SEAT,
                quantity=credited,
            )
            await uow.commit()

        Logger.base.info(
            f'🔓 [RELEASE] Credited {credited} seat(s) back to event {event_id}, '
            f'{event.available_seats}/{event.total_seats} available'
        )
        return True

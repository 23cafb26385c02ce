"""
Cancel Reservation Use Case - buyer-initiated

Normally the cancel only expires the checkout session; the gateway's own
expiry notification then runs the release path. When the gateway says the
session is already gone, no notification will come, so the seats are
reconciled here, inside a transaction that re-reads the order first.
"""

from typing import Callable

from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    DomainError,
    ForbiddenError,
    NotFoundError,
    PaymentSessionGoneError,
)
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.dto import CancelReservationResult
from src.service.reservation.app.interface import IEventCacheHandler, IPaymentGateway
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus


class CancelReservationUseCase:
    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        event_cache_handler: IEventCacheHandler,
        payment_gateway: IPaymentGateway,
    ) -> None:
        self.uow_factory = uow_factory
        self.event_cache_handler = event_cache_handler
        self.payment_gateway = payment_gateway
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def execute(self, *, order_id: str, buyer_id: str) -> CancelReservationResult:
        with self.tracer.start_as_current_span(
            'use_case.cancel_reservation',
            attributes={'order.id': order_id, 'buyer.id': buyer_id},
        ):
            async with self.uow_factory() as uow:
                order = await uow.order_repo.get_by_id(order_id=order_id)

            if order is None:
                raise NotFoundError('Order not found')
            if order.buyer_id != buyer_id:
                raise ForbiddenError('Only the buyer can cancel this order')
            if order.is_released:
                return CancelReservationResult(success=True, message='Reservation already cancelled')
            if not order.is_cancellable:
                raise DomainError('Cannot cancel a completed order')
            if not order.payment_session_id:
                return CancelReservationResult(success=False, message='No active session to cancel')

            try:
                await self.payment_gateway.expire_checkout_session(
                    session_id=order.payment_session_id
                )
                Logger.base.info(
                    f'🛑 [CANCEL] Session {order.payment_session_id} expired for order {order.id}, '
                    'release follows via notification'
                )
            except PaymentSessionGoneError:
                Logger.base.info(
                    f'🔧 [CANCEL] Session {order.payment_session_id} already gone, '
                    f'reconciling order {order.id} locally'
                )
                await self._reconcile(order)

            return CancelReservationResult(success=True, message='Reservation cancelled')

    async def _reconcile(self, order: Order) -> None:
        async with self.uow_factory() as uow:
            event = await uow.event_repo.get_by_id(event_id=order.event_id, for_update=True)
            if event is None:
                raise NotFoundError('Event not found')

            current = await uow.order_repo.get_by_id(order_id=order.id, for_update=True)
            if current is None:
                raise NotFoundError('Order not found')

            if current.is_released:
                Logger.base.info(f'⏭️ [CANCEL] Order {order.id} already {current.status}')
                return

            if current.status not in (OrderStatus.PENDING, OrderStatus.FAILED):
                # Payment landed between the fast check and this transaction
                Logger.base.warning(f'⚠️ [CANCEL] Order {order.id} became {current.status}, leaving it')
                return

            if not current.holds_seats:
                # FAILED, or a PENDING order whose hold never committed
                await uow.order_repo.update_status(order_id=current.id, status=OrderStatus.CANCELLED)
                await uow.commit()
                Logger.base.info(f'⏭️ [CANCEL] Order {order.id} held no seats, marked cancelled')
                return

            event.release_seats(current.quantity)
            await uow.event_repo.update_available_seats(
                event_id=event.id, available_seats=event.available_seats
            )
            await uow.order_repo.update_status(order_id=current.id, status=OrderStatus.EXPIRED)
            await uow.commit()

        Logger.base.info(
            f'🔓 [CANCEL] Credited {current.quantity} seat(s) back to event {order.event_id}'
        )
        await self.event_cache_handler.invalidate(event_id=order.event_id)

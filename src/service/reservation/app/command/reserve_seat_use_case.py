"""
Reserve Seat Use Case - lock-guarded, store-authoritative flow

Flow:
1. Validate quantity, read the event (cache first) and apply the free-event cap
2. Acquire the per-event lease (fail fast: busy -> 503, nothing touched)
3. Re-read the event and run the optimistic pre-checks
4. Create the pending order
5. Priced event: open a checkout session, attach it, schedule the expiration job
6. Store transaction: lock the event row, re-validate, decrement, mark the order
   as holding seats, and for free events create the attendee + confirm the order
7. Invalidate the cached snapshot
8. Release the lease (always)

Any failure before step 6 commits rolls back: the order is marked FAILED first,
then the opened session is expired. Both cleanups are best-effort; an order that
never got its seats_held mark is never credited, whatever status it is left in.
"""

import time
from typing import Callable, Optional

from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    ConflictError,
    CustomBaseError,
    DomainError,
    NotFoundError,
    ServiceBusyError,
)
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.dto import CheckoutSession, ReservationRequest, ReservationResult
from src.service.reservation.app.interface import (
    IEventCacheHandler,
    IEventLockHandler,
    IExpirationJobQueue,
    IPaymentGateway,
)
from src.service.reservation.app.query.get_event_use_case import GetEventUseCase
from src.service.reservation.domain.entity.attendee_entity import Attendee
from src.service.reservation.domain.entity.event_entity import Event
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus
from src.service.reservation.domain.value_object.checkout_metadata import CheckoutMetadata


class ReserveSeatUseCase:
    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        get_event_use_case: GetEventUseCase,
        event_cache_handler: IEventCacheHandler,
        event_lock_handler: IEventLockHandler,
        payment_gateway: IPaymentGateway,
        expiration_job_queue: IExpirationJobQueue,
    ) -> None:
        self.uow_factory = uow_factory
        self.get_event_use_case = get_event_use_case
        self.event_cache_handler = event_cache_handler
        self.event_lock_handler = event_lock_handler
        self.payment_gateway = payment_gateway
        self.expiration_job_queue = expiration_job_queue
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def reserve(self, request: ReservationRequest) -> ReservationResult:
        with self.tracer.start_as_current_span(
            'use_case.reserve_seat',
            attributes={
                'event.id': request.event_id,
                'buyer.id': request.buyer_id,
                'seat.quantity': request.quantity,
            },
        ):
            Logger.base.info(
                f'🎯 [RESERVE] buyer {request.buyer_id} requests {request.quantity} '
                f'seat(s) of event {request.event_id}'
            )

            # ========== Step 1: Cheap rejections, no lease taken yet ==========
            try:
                self._validate_quantity(request.quantity)
                event = await self._load_event(request.event_id)
                self._check_free_event_cap(event, request.quantity)
            except CustomBaseError as e:
                Logger.base.warning(f'⚠️ [RESERVE] Rejected: {e.message}')
                return ReservationResult.failure(event_id=request.event_id, error=e)

            # ========== Step 2: Per-event lease ==========
            token = await self.event_lock_handler.acquire(event_id=request.event_id)
            if token is None:
                Logger.base.warning(f'⏳ [RESERVE] Event {request.event_id} busy, lease not acquired')
                return ReservationResult.failure(
                    event_id=request.event_id, error=ServiceBusyError()
                )

            try:
                return await self._reserve_under_lease(request)
            finally:
                await self.event_lock_handler.release(event_id=request.event_id, token=token)

    async def _reserve_under_lease(self, request: ReservationRequest) -> ReservationResult:
        order: Optional[Order] = None
        session: Optional[CheckoutSession] = None

        try:
            # ========== Step 3: Re-read + optimistic checks ==========
            event = await self._load_event(request.event_id)
            await self._check_preconditions(event, request)

            # ========== Step 4: Pending order ==========
            order = Order.create_pending(
                event_id=request.event_id,
                buyer_id=request.buyer_id,
                quantity=request.quantity,
                amount=event.amount_for(request.quantity),
            )
            async with self.uow_factory() as uow:
                order = await uow.order_repo.create(order=order)
                await uow.commit()

            # ========== Step 5: Checkout session (priced only) ==========
            if not event.is_free:
                session = await self.payment_gateway.create_checkout_session(
                    product_name=event.name,
                    unit_price=event.price,
                    quantity=request.quantity,
                    buyer_email=request.buyer_email,
                    metadata=CheckoutMetadata(
                        event_id=request.event_id,
                        buyer_id=request.buyer_id,
                        quantity=request.quantity,
                        order_id=order.id,
                    ),
                )
                async with self.uow_factory() as uow:
                    await uow.order_repo.set_payment_session(
                        order_id=order.id, payment_session_id=session.session_id
                    )
                    await uow.commit()
                order.payment_session_id = session.session_id

                due_at_ms = int(time.time() * 1000) + settings.EXPIRATION_JOB_DELAY_SECONDS * 1000
                await self.expiration_job_queue.schedule(
                    session_id=session.session_id, due_at_ms=due_at_ms
                )

            # ========== Step 6: Authoritative transaction ==========
            await self._commit_hold(request=request, order=order)

        except Exception as e:
            await self._rollback(order=order, session=session, error=e)
            if isinstance(e, CustomBaseError):
                Logger.base.warning(f'⚠️ [RESERVE] Failed for event {request.event_id}: {e.message}')
                return ReservationResult.failure(
                    event_id=request.event_id, error=e, order_id=order.id if order else None
                )
            Logger.base.exception(f'❌ [RESERVE] Unexpected error for event {request.event_id}: {e}')
            return ReservationResult(
                success=False,
                event_id=request.event_id,
                order_id=order.id if order else None,
                error_message='Failed to reserve seat',
                status_code=500,
            )

        # ========== Step 7: Cache invalidation ==========
        await self.event_cache_handler.invalidate(event_id=request.event_id)

        if session is None:
            Logger.base.info(f'✅ [RESERVE] Order {order.id} confirmed (free event)')
            return ReservationResult(
                success=True,
                event_id=request.event_id,
                order_id=order.id,
                status=OrderStatus.CONFIRMED.value,
            )

        Logger.base.info(f'✅ [RESERVE] Order {order.id} held, awaiting payment {session.session_id}')
        return ReservationResult(
            success=True,
            event_id=request.event_id,
            order_id=order.id,
            status=OrderStatus.PENDING.value,
            checkout_url=session.url,
            session_id=session.session_id,
        )

    async def _commit_hold(self, *, request: ReservationRequest, order: Order) -> None:
        async with self.uow_factory() as uow:
            live_event = await uow.event_repo.get_by_id(event_id=request.event_id, for_update=True)
            if live_event is None:
                raise NotFoundError('Event not found')
            if await uow.attendee_repo.exists(
                event_id=request.event_id, buyer_id=request.buyer_id
            ):
                raise ConflictError('Already joined')

            live_event.hold_seats(request.quantity)
            await uow.event_repo.update_available_seats(
                event_id=request.event_id, available_seats=live_event.available_seats
            )
            await uow.order_repo.mark_seats_held(order_id=order.id)

            if live_event.is_free:
                await uow.attendee_repo.upsert(
                    attendee=Attendee(
                        event_id=request.event_id,
                        buyer_id=request.buyer_id,
                        order_id=order.id,
                        email=request.buyer_email,
                    )
                )
                await uow.order_repo.update_status(order_id=order.id, status=OrderStatus.CONFIRMED)
                order.status = OrderStatus.CONFIRMED

            await uow.commit()

        order.seats_held = True
        Logger.base.info(
            f'🪑 [RESERVE] Held {request.quantity} seat(s) of event {request.event_id}, '
            f'{live_event.available_seats}/{live_event.total_seats} left'
        )

    async def _rollback(
        self, *, order: Optional[Order], session: Optional[CheckoutSession], error: Exception
    ) -> None:
        error_text = error.message if isinstance(error, CustomBaseError) else str(error)

        # FAILED lands before the session expires, so its expiry notification finds no hold
        if order is not None:
            try:
                async with self.uow_factory() as uow:
                    await uow.order_repo.update_status(
                        order_id=order.id, status=OrderStatus.FAILED, error=error_text
                    )
                    await uow.commit()
                order.status = OrderStatus.FAILED
            except Exception as e:
                Logger.base.error(f'❌ [RESERVE] Rollback could not mark order {order.id} failed: {e}')

        if session is not None:
            try:
                await self.payment_gateway.expire_checkout_session(session_id=session.session_id)
            except Exception as e:
                Logger.base.error(
                    f'❌ [RESERVE] Rollback could not expire session {session.session_id}: {e}'
                )

    async def _load_event(self, event_id: int) -> Event:
        event = await self.get_event_use_case.execute(event_id=event_id)
        if event is None:
            raise NotFoundError('Event not found')
        return event

    async def _check_preconditions(self, event: Event, request: ReservationRequest) -> None:
        if event.owner_id == request.buyer_id:
            raise ConflictError('Cannot reserve seats for your own event')
        self._check_free_event_cap(event, request.quantity)
        if event.available_seats < request.quantity:
            raise ConflictError(f'Only {event.available_seats} seats available')

        async with self.uow_factory() as uow:
            joined = await uow.attendee_repo.exists(
                event_id=request.event_id, buyer_id=request.buyer_id
            )
        if joined:
            raise ConflictError('Already joined')

    @staticmethod
    def _validate_quantity(quantity: int) -> None:
        if quantity < 1 or quantity > settings.MAX_SEATS_PER_ORDER:
            raise DomainError(f'Quantity must be between 1 and {settings.MAX_SEATS_PER_ORDER}')

    @staticmethod
    def _check_free_event_cap(event: Event, quantity: int) -> None:
        if event.is_free and quantity > settings.FREE_EVENT_MAX_SEATS:
            raise DomainError(
                f'Free events are limited to {settings.FREE_EVENT_MAX_SEATS} seat per buyer'
            )

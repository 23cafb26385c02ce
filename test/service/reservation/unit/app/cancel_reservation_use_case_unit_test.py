import pytest

from src.platform.exception.exceptions import (
    DomainError,
    ForbiddenError,
    NotFoundError,
    PaymentGatewayError,
)
from src.service.reservation.domain.enum.order_status import OrderStatus


@pytest.mark.unit
class TestCancelReservation:
    @pytest.mark.asyncio
    async def test_unknown_order(self, cancel_reservation_use_case) -> None:
        with pytest.raises(NotFoundError, match='Order not found'):
            await cancel_reservation_use_case.execute(order_id='missing', buyer_id='buyer-1')

    @pytest.mark.asyncio
    async def test_only_the_buyer_can_cancel(self, cancel_reservation_use_case, store) -> None:
        event = store.add_event()
        order = store.add_order(event_id=event.id, payment_session_id='cs_1')

        with pytest.raises(ForbiddenError, match='Only the buyer can cancel this order'):
            await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='someone-else')

    @pytest.mark.asyncio
    @pytest.mark.parametrize('status', [OrderStatus.PAID, OrderStatus.CONFIRMED])
    async def test_completed_order_cannot_be_cancelled(
        self, cancel_reservation_use_case, store, status: OrderStatus
    ) -> None:
        event = store.add_event()
        order = store.add_order(event_id=event.id, status=status, payment_session_id='cs_1')

        with pytest.raises(DomainError, match='Cannot cancel a completed order'):
            await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='buyer-1')

    @pytest.mark.asyncio
    @pytest.mark.parametrize('status', [OrderStatus.EXPIRED, OrderStatus.CANCELLED])
    async def test_already_released_order_is_a_no_op(
        self, cancel_reservation_use_case, store, payment_gateway, status: OrderStatus
    ) -> None:
        event = store.add_event()
        order = store.add_order(event_id=event.id, status=status, payment_session_id='cs_1')

        result = await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='buyer-1')

        assert result.success is True
        assert result.message == 'Reservation already cancelled'
        assert payment_gateway.expire_calls == []

    @pytest.mark.asyncio
    async def test_order_without_session(self, cancel_reservation_use_case, store) -> None:
        event = store.add_event()
        order = store.add_order(event_id=event.id)

        result = await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='buyer-1')

        assert result.success is False
        assert result.message == 'No active session to cancel'

    @pytest.mark.asyncio
    async def test_open_session_is_expired_and_seats_wait_for_notification(
        self, cancel_reservation_use_case, store, payment_gateway
    ) -> None:
        event = store.add_event(total_seats=10, available_seats=9)
        payment_gateway.sessions['cs_1'] = 'open'
        order = store.add_order(event_id=event.id, payment_session_id='cs_1')

        result = await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='buyer-1')

        assert result.success is True
        assert result.message == 'Reservation cancelled'
        assert payment_gateway.sessions['cs_1'] == 'expired'
        assert store.orders[order.id].status == OrderStatus.PENDING
        assert store.available_seats(event.id) == 9

    @pytest.mark.asyncio
    async def test_gone_session_is_reconciled_locally(
        self, cancel_reservation_use_case, store, payment_gateway, event_cache_handler
    ) -> None:
        event = store.add_event(total_seats=10, available_seats=8)
        payment_gateway.close_session('cs_1')
        order = store.add_order(event_id=event.id, quantity=2, payment_session_id='cs_1')

        result = await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='buyer-1')

        assert result.success is True
        assert store.orders[order.id].status == OrderStatus.EXPIRED
        assert store.available_seats(event.id) == 10
        assert event.id in event_cache_handler.invalidated

    @pytest.mark.asyncio
    async def test_repeated_cancel_credits_once(
        self, cancel_reservation_use_case, store, payment_gateway
    ) -> None:
        event = store.add_event(total_seats=10, available_seats=8)
        payment_gateway.close_session('cs_1')
        order = store.add_order(event_id=event.id, quantity=2, payment_session_id='cs_1')

        await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='buyer-1')
        second = await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='buyer-1')

        assert second.message == 'Reservation already cancelled'
        assert store.available_seats(event.id) == 10

    @pytest.mark.asyncio
    async def test_failed_order_with_gone_session_becomes_cancelled(
        self, cancel_reservation_use_case, store, payment_gateway
    ) -> None:
        event = store.add_event(total_seats=10, available_seats=10)
        payment_gateway.close_session('cs_1')
        order = store.add_order(
            event_id=event.id, status=OrderStatus.FAILED, payment_session_id='cs_1'
        )

        result = await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='buyer-1')

        assert result.success is True
        assert store.orders[order.id].status == OrderStatus.CANCELLED
        assert store.available_seats(event.id) == 10

    @pytest.mark.asyncio
    async def test_other_gateway_errors_propagate(
        self, cancel_reservation_use_case, store, payment_gateway
    ) -> None:
        event = store.add_event(total_seats=10, available_seats=9)
        payment_gateway.sessions['cs_1'] = 'open'
        payment_gateway.expire_error = PaymentGatewayError('Stripe unavailable')
        order = store.add_order(event_id=event.id, payment_session_id='cs_1')

        with pytest.raises(PaymentGatewayError):
            await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='buyer-1')

        assert store.orders[order.id].status == OrderStatus.PENDING
        assert store.available_seats(event.id) == 9

    @pytest.mark.asyncio
    async def test_pending_order_that_never_held_seats_is_not_credited(
        self, cancel_reservation_use_case, store, payment_gateway
    ) -> None:
        """The reserve lost its hold and could not record FAILED before expiring the session"""
        event = store.add_event(total_seats=1, available_seats=0)
        payment_gateway.close_session('cs_1')
        order = store.add_order(event_id=event.id, payment_session_id='cs_1', seats_held=False)

        result = await cancel_reservation_use_case.execute(order_id=order.id, buyer_id='buyer-1')

        assert result.success is True
        assert store.orders[order.id].status == OrderStatus.CANCELLED
        assert store.available_seats(event.id) == 0

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface.i_order_repo import IOrderRepo
from src.service.reservation.domain.entity.order_entity import Order
from src.service.reservation.domain.enum.order_status import OrderStatus
from src.service.reservation.driven_adapter.model.order_model import OrderModel


class OrderRepoImpl(IOrderRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_entity(db_order: OrderModel) -> Order:
        return Order(
            id=str(db_order.id),
            event_id=db_order.event_id,
            buyer_id=db_order.buyer_id,
            quantity=db_order.quantity,
            amount=db_order.amount,
            status=OrderStatus(db_order.status),
            payment_session_id=db_order.payment_session_id,
            error=db_order.error,
            seats_held=db_order.seats_held,
            created_at=db_order.created_at,
            updated_at=db_order.updated_at,
        )

    @Logger.io
    async def create(self, *, order: Order) -> Order:
        db_order = OrderModel(
            id=order.id,
            event_id=order.event_id,
            buyer_id=order.buyer_id,
            quantity=order.quantity,
            amount=order.amount,
            status=order.status.value,
            payment_session_id=order.payment_session_id,
            error=order.error,
            seats_held=order.seats_held,
        )
        self.session.add(db_order)
        await self.session.flush()
        await self.session.refresh(db_order)

        return OrderRepoImpl._to_entity(db_order)

    @Logger.io
    async def get_by_id(self, *, order_id: str, for_update: bool = False) -> Optional[Order]:
        stmt = select(OrderModel).where(OrderModel.id == order_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        db_order = result.scalar_one_or_none()

        if not db_order:
            return None

        return OrderRepoImpl._to_entity(db_order)

    @Logger.io
    async def update_status(
        self, *, order_id: str, status: OrderStatus, error: Optional[str] = None
    ) -> None:
        values: dict = {'status': status.value, 'updated_at': datetime.now(timezone.utc)}
        if error is not None:
            values['error'] = error
        await self.session.execute(
            sql_update(OrderModel).where(OrderModel.id == order_id).values(**values)
        )

    @Logger.io
    async def set_payment_session(self, *, order_id: str, payment_session_id: str) -> None:
        await self.session.execute(
            sql_update(OrderModel)
            .where(OrderModel.id == order_id)
            .values(payment_session_id=payment_session_id, updated_at=datetime.now(timezone.utc))
        )

    @Logger.io
    async def mark_seats_held(self, *, order_id: str) -> None:
        await self.session.execute(
            sql_update(OrderModel)
            .where(OrderModel.id == order_id)
            .values(seats_held=True, updated_at=datetime.now(timezone.utc))
        )

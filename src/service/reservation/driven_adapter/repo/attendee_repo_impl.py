from typing import Optional

from sqlalchemy import delete as sql_delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface.i_attendee_repo import IAttendeeRepo
from src.service.reservation.domain.entity.attendee_entity import Attendee
from src.service.reservation.driven_adapter.model.attendee_model import AttendeeModel


class AttendeeRepoImpl(IAttendeeRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_entity(db_attendee: AttendeeModel) -> Attendee:
        return Attendee(
            event_id=db_attendee.event_id,
            buyer_id=db_attendee.buyer_id,
            order_id=db_attendee.order_id,
            email=db_attendee.email,
            payment_event_id=db_attendee.payment_event_id,
            joined_at=db_attendee.joined_at,
        )

    @Logger.io
    async def get(self, *, event_id: int, buyer_id: str) -> Optional[Attendee]:
        result = await self.session.execute(
            select(AttendeeModel).where(
                AttendeeModel.event_id == event_id, AttendeeModel.buyer_id == buyer_id
            )
        )
        db_attendee = result.scalar_one_or_none()

        if not db_attendee:
            return None

        return AttendeeRepoImpl._to_entity(db_attendee)

    @Logger.io
    async def exists(self, *, event_id: int, buyer_id: str) -> bool:
        result = await self.session.execute(
            select(func.count())
            .select_from(AttendeeModel)
            .where(AttendeeModel.event_id == event_id, AttendeeModel.buyer_id == buyer_id)
        )
        return (result.scalar_one() or 0) > 0

    @Logger.io
    async def upsert(self, *, attendee: Attendee) -> None:
        stmt = pg_insert(AttendeeModel).values(
            event_id=attendee.event_id,
            buyer_id=attendee.buyer_id,
            order_id=attendee.order_id,
            email=attendee.email,
            payment_event_id=attendee.payment_event_id,
            joined_at=attendee.joined_at,
        )
        # Merge: keep existing columns when the incoming value is missing
        stmt = stmt.on_conflict_do_update(
            index_elements=[AttendeeModel.event_id, AttendeeModel.buyer_id],
            set_={
                'order_id': func.coalesce(stmt.excluded.order_id, AttendeeModel.order_id),
                'email': func.coalesce(stmt.excluded.email, AttendeeModel.email),
                'payment_event_id': func.coalesce(
                    stmt.excluded.payment_event_id, AttendeeModel.payment_event_id
                ),
            },
        )
        await self.session.execute(stmt)

    @Logger.io
    async def delete(self, *, event_id: int, buyer_id: str) -> None:
        await self.session.execute(
            sql_delete(AttendeeModel).where(
                AttendeeModel.event_id == event_id, AttendeeModel.buyer_id == buyer_id
            )
        )

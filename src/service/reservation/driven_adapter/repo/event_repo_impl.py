from typing import Optional

from sqlalchemy import select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface.i_event_repo import IEventRepo
from src.service.reservation.domain.entity.event_entity import Event
from src.service.reservation.driven_adapter.model.event_model import EventModel


class EventRepoImpl(IEventRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_entity(db_event: EventModel) -> Event:
        return Event(
            id=db_event.id,
            name=db_event.name,
            description=db_event.description,
            location=db_event.location,
            event_type=db_event.event_type,
            price=db_event.price,
            total_seats=db_event.total_seats,
            available_seats=db_event.available_seats,
            owner_id=db_event.owner_id,
            created_at=db_event.created_at,
        )

    @Logger.io
    async def create(self, *, event: Event) -> Event:
        db_event = EventModel(
            name=event.name,
            description=event.description,
            location=event.location,
            event_type=event.event_type.value,
            price=event.price,
            total_seats=event.total_seats,
            available_seats=event.available_seats,
            owner_id=event.owner_id,
        )
        if event.created_at is not None:
            db_event.created_at = event.created_at
        self.session.add(db_event)
        await self.session.flush()
        await self.session.refresh(db_event)

        return EventRepoImpl._to_entity(db_event)

    @Logger.io
    async def get_by_id(self, *, event_id: int, for_update: bool = False) -> Optional[Event]:
        stmt = select(EventModel).where(EventModel.id == event_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        db_event = result.scalar_one_or_none()

        if not db_event:
            return None

        return EventRepoImpl._to_entity(db_event)

    @Logger.io
    async def update_available_seats(self, *, event_id: int, available_seats: int) -> None:
        await self.session.execute(
            sql_update(EventModel)
            .where(EventModel.id == event_id)
            .values(available_seats=available_seats)
        )

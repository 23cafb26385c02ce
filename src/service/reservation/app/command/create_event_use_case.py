from typing import Callable

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface import IEventCacheHandler
from src.service.reservation.domain.entity.event_entity import Event


class CreateEventUseCase:
    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        event_cache_handler: IEventCacheHandler,
    ) -> None:
        self.uow_factory = uow_factory
        self.event_cache_handler = event_cache_handler

    @Logger.io
    async def execute(
        self,
        *,
        name: str,
        description: str,
        location: str,
        event_type: str,
        price: int,
        total_seats: int,
        owner_id: str,
    ) -> Event:
        event = Event.create(
            name=name,
            description=description,
            location=location,
            event_type=event_type,
            price=price,
            total_seats=total_seats,
            owner_id=owner_id,
        )

        async with self.uow_factory() as uow:
            event = await uow.event_repo.create(event=event)
            await uow.commit()

        Logger.base.info(
            f'🎫 [EVENT] Created event {event.id} "{event.name}" '
            f'({event.total_seats} seats, price={event.price})'
        )
        await self.event_cache_handler.set(event=event)
        return event

"""
Get Event Use Case - read-through snapshot read

Cache hit: the handler slides the TTL and returns the snapshot.
Cache miss: note the invalidation version, read the authoritative store, fill
the cache unless an invalidation landed in between, return.
No lock, no domain writes.
"""

from typing import Callable, Optional

from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface import IEventCacheHandler
from src.service.reservation.domain.entity.event_entity import Event


class GetEventUseCase:
    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        event_cache_handler: IEventCacheHandler,
    ) -> None:
        self.uow_factory = uow_factory
        self.event_cache_handler = event_cache_handler
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def execute(self, *, event_id: int) -> Optional[Event]:
        with self.tracer.start_as_current_span(
            'use_case.get_event', attributes={'event.id': event_id}
        ):
            cached = await self.event_cache_handler.get(event_id=event_id)
            if cached is not None:
                return cached

            version = await self.event_cache_handler.get_version(event_id=event_id)
            async with self.uow_factory() as uow:
                event = await uow.event_repo.get_by_id(event_id=event_id)

            if event is None:
                return None

            if version is not None:
                await self.event_cache_handler.fill(event=event, version=version)
            return event

"""
https://python-dependency-injector.ets-labs.org/index.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.platform.state.distributed_lock import DistributedLock
from src.service.reservation.app.command.cancel_reservation_use_case import (
    CancelReservationUseCase,
)
from src.service.reservation.app.command.confirm_seat_use_case import ConfirmSeatUseCase
from src.service.reservation.app.command.create_event_use_case import CreateEventUseCase
from src.service.reservation.app.command.expire_overdue_sessions_use_case import (
    ExpireOverdueSessionsUseCase,
)
from src.service.reservation.app.command.release_seat_use_case import ReleaseSeatUseCase
from src.service.reservation.app.command.reserve_seat_use_case import ReserveSeatUseCase
from src.service.reservation.app.query.get_event_use_case import GetEventUseCase
from src.service.reservation.driven_adapter.payment.stripe_payment_gateway_impl import (
    StripePaymentGatewayImpl,
)
from src.service.reservation.driven_adapter.state.event_cache_handler_impl import (
    EventCacheHandlerImpl,
)
from src.service.reservation.driven_adapter.state.event_lock_handler_impl import (
    EventLockHandlerImpl,
)
from src.service.reservation.driven_adapter.state.expiration_job_queue_impl import (
    ExpirationJobQueueImpl,
)
from src.service.reservation.driving_adapter.payment_notification_handler import (
    PaymentNotificationHandler,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database: one UoW (one transaction) per call, use cases get the factory itself
    unit_of_work = providers.Factory(SqlAlchemyUnitOfWork)

    # Kvrocks-backed adapters (stateless, share the global client)
    distributed_lock = providers.Singleton(DistributedLock)
    event_lock_handler = providers.Singleton(
        EventLockHandlerImpl,
        distributed_lock=distributed_lock,
        ttl_ms=config_service.provided.LOCK_TTL_MS,
    )
    event_cache_handler = providers.Singleton(
        EventCacheHandlerImpl,
        ttl_seconds=config_service.provided.EVENT_CACHE_TTL_SECONDS,
    )
    expiration_job_queue = providers.Singleton(ExpirationJobQueueImpl)

    # Payment gateway (api key, currency and redirect base from settings)
    payment_gateway = providers.Singleton(StripePaymentGatewayImpl)

    # Queries
    get_event_use_case = providers.Singleton(
        GetEventUseCase,
        uow_factory=unit_of_work.provider,
        event_cache_handler=event_cache_handler,
    )

    # Commands
    create_event_use_case = providers.Singleton(
        CreateEventUseCase,
        uow_factory=unit_of_work.provider,
        event_cache_handler=event_cache_handler,
    )
    reserve_seat_use_case = providers.Singleton(
        ReserveSeatUseCase,
        uow_factory=unit_of_work.provider,
        get_event_use_case=get_event_use_case,
        event_cache_handler=event_cache_handler,
        event_lock_handler=event_lock_handler,
        payment_gateway=payment_gateway,
        expiration_job_queue=expiration_job_queue,
    )
    confirm_seat_use_case = providers.Singleton(
        ConfirmSeatUseCase,
        uow_factory=unit_of_work.provider,
        event_cache_handler=event_cache_handler,
        event_lock_handler=event_lock_handler,
    )
    release_seat_use_case = providers.Singleton(
        ReleaseSeatUseCase,
        uow_factory=unit_of_work.provider,
        event_cache_handler=event_cache_handler,
        event_lock_handler=event_lock_handler,
    )
    cancel_reservation_use_case = providers.Singleton(
        CancelReservationUseCase,
        uow_factory=unit_of_work.provider,
        event_cache_handler=event_cache_handler,
        payment_gateway=payment_gateway,
    )
    expire_overdue_sessions_use_case = providers.Singleton(
        ExpireOverdueSessionsUseCase,
        expiration_job_queue=expiration_job_queue,
        payment_gateway=payment_gateway,
    )

    # Driving adapters
    payment_notification_handler = providers.Singleton(
        PaymentNotificationHandler,
        confirm_seat_use_case=confirm_seat_use_case,
        release_seat_use_case=release_seat_use_case,
    )


container = Container()

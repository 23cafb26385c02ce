"""Reservation Service Interfaces"""

from src.service.reservation.app.interface.i_attendee_repo import IAttendeeRepo
from src.service.reservation.app.interface.i_event_cache_handler import IEventCacheHandler
from src.service.reservation.app.interface.i_event_lock_handler import IEventLockHandler
from src.service.reservation.app.interface.i_event_repo import IEventRepo
from src.service.reservation.app.interface.i_expiration_job_queue import IExpirationJobQueue
from src.service.reservation.app.interface.i_order_repo import IOrderRepo
from src.service.reservation.app.interface.i_payment_gateway import IPaymentGateway
from src.service.reservation.app.interface.i_payment_notification_ledger_repo import (
    IPaymentNotificationLedgerRepo,
)

__all__ = [
    'IAttendeeRepo',
    'IEventCacheHandler',
    'IEventLockHandler',
    'IEventRepo',
    'IExpirationJobQueue',
    'IOrderRepo',
    'IPaymentGateway',
    'IPaymentNotificationLedgerRepo',
]

"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.reservation.driven_adapter.model.attendee_model import AttendeeModel
from src.service.reservation.driven_adapter.model.event_model import EventModel
from src.service.reservation.driven_adapter.model.order_model import OrderModel
from src.service.reservation.driven_adapter.model.payment_notification_model import (
    PaymentNotificationModel,
)

__all__ = [
    'AttendeeModel',
    'EventModel',
    'OrderModel',
    'PaymentNotificationModel',
]

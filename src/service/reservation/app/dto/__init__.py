"""Reservation Application DTOs"""

from src.service.reservation.app.dto.checkout_session_dto import CheckoutSession
from src.service.reservation.app.dto.reservation_dto import (
    CancelReservationResult,
    ReservationRequest,
    ReservationResult,
)


__all__ = [
    'CancelReservationResult',
    'CheckoutSession',
    'ReservationRequest',
    'ReservationResult',
]

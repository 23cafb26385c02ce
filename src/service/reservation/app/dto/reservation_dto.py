"""
Reservation DTOs

Request/Result DTOs for the reserve and cancel operations.
"""

from typing import Optional

import attrs

from src.platform.exception.exceptions import CustomBaseError


@attrs.define
class ReservationRequest:
    event_id: int
    buyer_id: str
    buyer_email: str
    quantity: int


@attrs.define
class ReservationResult:
    """
    Outcome of a reserve call.

    Free event:   success, order_id, status='confirmed'
    Priced event: success, order_id, checkout_url, session_id
    Failure:      success=False, error_message, status_code
                  (409 conflict, 503 busy/retry, 404 not found, 400 invalid, 500 unexpected)
    """

    success: bool
    event_id: int
    order_id: Optional[str] = None
    status: Optional[str] = None
    checkout_url: Optional[str] = None
    session_id: Optional[str] = None
    error_message: Optional[str] = None
    status_code: int = 200

    @classmethod
    def failure(
        cls, *, event_id: int, error: CustomBaseError, order_id: Optional[str] = None
    ) -> 'ReservationResult':
        return cls(
            success=False,
            event_id=event_id,
            order_id=order_id,
            error_message=error.message,
            status_code=error.status_code,
        )

    @property
    def is_retryable(self) -> bool:
        return self.status_code == 503


@attrs.define
class CancelReservationResult:
    success: bool
    message: str

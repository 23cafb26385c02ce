class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class ServiceBusyError(CustomBaseError):
    """Transient: the per-event lock is held or the lock service is unreachable. Retryable."""

    def __init__(self, message: str = 'System busy, please try again.') -> None:
        super().__init__(message, 503)


class PaymentGatewayError(CustomBaseError):
    """Transient or unclassified payment gateway failure."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message, status_code)


class PaymentSessionGoneError(PaymentGatewayError):
    """Gateway reports the checkout session is missing or already in a terminal state."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 410)

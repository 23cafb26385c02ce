from abc import ABC, abstractmethod

from src.service.reservation.app.dto.checkout_session_dto import CheckoutSession
from src.service.reservation.domain.value_object.checkout_metadata import CheckoutMetadata


class IPaymentGateway(ABC):
    """
    External checkout provider.

    Both calls raise PaymentSessionGoneError when the session is missing or
    already terminal at the gateway, and PaymentGatewayError for anything else.
    """

    @abstractmethod
    async def create_checkout_session(
        self,
        *,
        product_name: str,
        unit_price: int,
        quantity: int,
        buyer_email: str,
        metadata: CheckoutMetadata,
    ) -> CheckoutSession:
        pass

    @abstractmethod
    async def expire_checkout_session(self, *, session_id: str) -> None:
        pass

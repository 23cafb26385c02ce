"""
Stripe Payment Gateway Implementation

The Stripe SDK is synchronous; every call runs in a worker thread so the
event loop is never blocked while the gateway is slow.

Error classification:
    - InvalidRequestError with code 'resource_missing', or a complaint about the
      session status ("Only Checkout Sessions with a status in [open] can be
      expired") -> PaymentSessionGoneError
    - any other StripeError -> PaymentGatewayError
"""

import functools
import time
from typing import Any, Callable, Optional

import anyio
import stripe

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import PaymentGatewayError, PaymentSessionGoneError
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.dto.checkout_session_dto import CheckoutSession
from src.service.reservation.app.interface.i_payment_gateway import IPaymentGateway
from src.service.reservation.domain.value_object.checkout_metadata import CheckoutMetadata


class StripePaymentGatewayImpl(IPaymentGateway):
    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        currency: Optional[str] = None,
        client_url: Optional[str] = None,
        session_ttl_seconds: Optional[int] = None,
    ):
        self.api_key = api_key or settings.STRIPE_SECRET_KEY.get_secret_value()
        self.currency = currency or settings.STRIPE_CURRENCY
        self.client_url = (client_url or settings.CLIENT_URL).rstrip('/')
        self.session_ttl_seconds = session_ttl_seconds or settings.CHECKOUT_SESSION_TTL_SECONDS

    @staticmethod
    def _classify(e: stripe.StripeError) -> PaymentGatewayError:
        message = getattr(e, 'user_message', None) or str(e)
        if isinstance(e, stripe.InvalidRequestError):
            if e.code == 'resource_missing' or 'status' in message.lower():
                return PaymentSessionGoneError(message)
        return PaymentGatewayError(f'Payment gateway error: {message}')

    async def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return await anyio.to_thread.run_sync(
                functools.partial(func, *args, api_key=self.api_key, **kwargs)
            )
        except stripe.StripeError as e:
            raise self._classify(e) from e

    @Logger.io
    async def create_checkout_session(
        self,
        *,
        product_name: str,
        unit_price: int,
        quantity: int,
        buyer_email: str,
        metadata: CheckoutMetadata,
    ) -> CheckoutSession:
        session = await self._call(
            stripe.checkout.Session.create,
            mode='payment',
            payment_method_types=['card'],
            line_items=[
                {
                    'price_data': {
                        'currency': self.currency,
                        'product_data': {'name': product_name},
                        # Stripe amounts are in the smallest currency unit
                        'unit_amount': unit_price * 100,
                    },
                    'quantity': quantity,
                }
            ],
            customer_email=buyer_email,
            success_url=f'{self.client_url}/success?session_id={{CHECKOUT_SESSION_ID}}',
            cancel_url=f'{self.client_url}/cancel',
            expires_at=int(time.time()) + self.session_ttl_seconds,
            metadata=metadata.to_metadata(),
        )
        Logger.base.info(
            f'💳 [STRIPE] Session {session.id} opened for event {metadata.event_id} '
            f'(order={metadata.order_id}, qty={quantity})'
        )
        return CheckoutSession(session_id=session.id, url=session.url)

    @Logger.io
    async def expire_checkout_session(self, *, session_id: str) -> None:
        await self._call(stripe.checkout.Session.expire, session_id)
        Logger.base.info(f'⌛ [STRIPE] Session {session_id} expired')

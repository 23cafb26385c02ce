import attrs


@attrs.frozen
class CheckoutSession:
    """Handle of a payment session opened at the gateway"""

    session_id: str
    url: str

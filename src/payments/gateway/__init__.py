"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (default)
- StripeGateway when PAYMENT_GATEWAY=stripe
"""

import os

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building it from the environment on first use."""
    global _current_gateway
    if _current_gateway is None:
        if os.environ.get("PAYMENT_GATEWAY", "fake").lower() == "stripe":
            from payments.gateway.stripe_adapter import StripeGateway

            _current_gateway = StripeGateway.from_env()
        else:
            _current_gateway = FakeGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None


DEFAULT_SUCCESS_URL = "http://localhost:3001/orders/summary/{order_group_id}?session_id={CHECKOUT_SESSION_ID}"
DEFAULT_CANCEL_URL = (
    "http://localhost:3001/orders/summary/{order_group_id}?session_id={CHECKOUT_SESSION_ID}&cancelled=true"
)


def checkout_urls(order_group_id: str) -> tuple[str, str]:
    """Success and cancel URLs for a group's hosted checkout page.

    `{order_group_id}` in the configured URLs is filled in here; the gateway
    substitutes `{CHECKOUT_SESSION_ID}` itself.
    """
    success = os.environ.get("CHECKOUT_SUCCESS_URL", DEFAULT_SUCCESS_URL)
    cancel = os.environ.get("CHECKOUT_CANCEL_URL", DEFAULT_CANCEL_URL)
    return (
        success.replace("{order_group_id}", order_group_id),
        cancel.replace("{order_group_id}", order_group_id),
    )

"""Cross-domain event contracts for Payments domain events.

Ordering marks every order of a group paid (or records the failed attempt)
when a hosted checkout session settles. Registered as an external event via
domain.register_external_event() with a matching __type__ string.

The source-of-truth events are in src/payments/session/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String


class PaymentSessionSettled(BaseEvent):
    """The gateway reported a final outcome for a checkout session."""

    __version__ = 1

    payment_session_id = Identifier(required=True)
    order_group_id = String(required=True)
    customer_id = Identifier(required=True)
    gateway_session_id = String(required=True)
    status = String(required=True)  # "paid" or "failed"
    amount = Float(required=True)
    settled_at = DateTime(required=True)

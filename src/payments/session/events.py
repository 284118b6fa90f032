"""Domain events for the PaymentSession aggregate.

PaymentSessionSettled is also published to Ordering (see
shared/events/payments.py), which marks the group's orders paid.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from payments.domain import payments


@payments.event(part_of="PaymentSession")
class PaymentSessionOpened:
    """A hosted checkout session was created for an order group."""

    __version__ = 1

    payment_session_id = Identifier(required=True)
    order_group_id = String(required=True)
    customer_id = Identifier(required=True)
    gateway_session_id = String()
    amount = Float(required=True)
    opened_at = DateTime(required=True)


@payments.event(part_of="PaymentSession")
class PaymentSessionRetried:
    """The customer asked for a fresh checkout session."""

    __version__ = 1

    payment_session_id = Identifier(required=True)
    order_group_id = String(required=True)
    gateway_session_id = String(required=True)
    attempt_number = Integer(required=True)
    retried_at = DateTime(required=True)


@payments.event(part_of="PaymentSession")
class PaymentSessionSettled:
    """The gateway reported a final outcome for a checkout session."""

    __version__ = 1

    payment_session_id = Identifier(required=True)
    order_group_id = String(required=True)
    customer_id = Identifier(required=True)
    gateway_session_id = String(required=True)
    status = String(required=True)  # "paid" or "failed"
    amount = Float(required=True)
    settled_at = DateTime(required=True)

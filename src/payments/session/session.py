"""PaymentSession aggregate — one hosted checkout per order group.

Direct-sale checkouts are paid once per group on the gateway's hosted page.
The session keeps the line items it sent to the gateway so a failed or
abandoned payment can be retried, and records every gateway session it
opened as an attempt.

State Machine:
    OPEN → PAID
    OPEN → FAILED → OPEN (retry)
    OPEN → EXPIRED → OPEN (retry)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, String, Text

from payments.domain import payments
from payments.session.events import (
    PaymentSessionOpened,
    PaymentSessionRetried,
    PaymentSessionSettled,
)

PAID_GATEWAY_STATUSES = ("paid", "no_payment_required")


class PaymentSessionStatus(Enum):
    OPEN = "open"
    PAID = "paid"
    FAILED = "failed"
    EXPIRED = "expired"


class AttemptStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


@payments.entity(part_of="PaymentSession")
class PaymentAttempt:
    """A gateway checkout session opened for this group."""

    session_id = String(required=True, max_length=255)
    status = String(max_length=20, choices=AttemptStatus, default=AttemptStatus.PENDING.value)
    amount = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()


@payments.aggregate
class PaymentSession:
    order_group_id = String(required=True, max_length=8)
    customer_id = Identifier(required=True)
    customer_email = String(max_length=254)
    order_ids = Text(default="[]")  # JSON list
    line_items = Text(default="[]")  # JSON list of {name, unit_amount, quantity}
    amount = Float(default=0.0)
    currency = String(max_length=3, default="AED")
    session_id = String(max_length=255)
    session_url = String(max_length=2000)
    status = String(
        max_length=20,
        choices=PaymentSessionStatus,
        default=PaymentSessionStatus.OPEN.value,
    )
    attempts = HasMany(PaymentAttempt)
    paid_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open(cls, order_group_id, customer_id, customer_email, order_ids, line_items, amount, gateway_session=None):
        """Record a checkout for an order group.

        `gateway_session` is the CheckoutSessionResult from the gateway, or
        None when the gateway refused to create one; the session then starts
        out failed and can be retried.
        """
        now = datetime.now(UTC)
        session = cls(
            order_group_id=order_group_id,
            customer_id=customer_id,
            customer_email=customer_email,
            order_ids=json.dumps(list(order_ids)),
            line_items=json.dumps(line_items),
            amount=amount,
            currency="AED",
            status=PaymentSessionStatus.OPEN.value if gateway_session else PaymentSessionStatus.FAILED.value,
            created_at=now,
            updated_at=now,
        )
        if gateway_session:
            session._start_attempt(gateway_session, now)

        session.raise_(
            PaymentSessionOpened(
                payment_session_id=str(session.id),
                order_group_id=order_group_id,
                customer_id=str(customer_id),
                gateway_session_id=gateway_session.session_id if gateway_session else None,
                amount=amount,
                opened_at=now,
            )
        )
        return session

    @property
    def is_paid(self):
        return self.status == PaymentSessionStatus.PAID.value

    @property
    def stored_line_items(self):
        return json.loads(self.line_items or "[]")

    @property
    def amount_in_fils(self):
        return sum(item["unit_amount"] * item["quantity"] for item in self.stored_line_items)

    def _start_attempt(self, gateway_session, now):
        self.session_id = gateway_session.session_id
        self.session_url = gateway_session.url
        self.add_attempts(
            PaymentAttempt(
                session_id=gateway_session.session_id,
                status=AttemptStatus.PENDING.value,
                amount=self.amount,
                created_at=now,
                updated_at=now,
            )
        )

    def _attempt_for(self, gateway_session_id):
        return next((a for a in (self.attempts or []) if a.session_id == gateway_session_id), None)

    def retry(self, gateway_session):
        """Replace the current gateway session with a fresh one."""
        if self.is_paid:
            raise ValidationError({"payment": ["Order is already paid"]})

        now = datetime.now(UTC)
        self._start_attempt(gateway_session, now)
        self.status = PaymentSessionStatus.OPEN.value
        self.updated_at = now
        self.raise_(
            PaymentSessionRetried(
                payment_session_id=str(self.id),
                order_group_id=self.order_group_id,
                gateway_session_id=gateway_session.session_id,
                attempt_number=len(self.attempts),
                retried_at=now,
            )
        )

    def settle(self, gateway_session_id, gateway_payment_status, amount=None):
        """Apply the gateway's outcome for one of this group's sessions.

        Returns False when the group was already paid and nothing changed.
        """
        if self.is_paid:
            return False

        now = datetime.now(UTC)
        paid = gateway_payment_status in PAID_GATEWAY_STATUSES
        outcome = AttemptStatus.PAID.value if paid else AttemptStatus.FAILED.value
        settled_amount = amount if amount is not None else self.amount

        attempt = self._attempt_for(gateway_session_id)
        if attempt is None:
            self.add_attempts(
                PaymentAttempt(
                    session_id=gateway_session_id,
                    status=outcome,
                    amount=settled_amount,
                    created_at=now,
                    updated_at=now,
                )
            )
        else:
            attempt.status = outcome
            attempt.amount = settled_amount
            attempt.updated_at = now

        self.session_id = gateway_session_id
        self.status = PaymentSessionStatus.PAID.value if paid else PaymentSessionStatus.FAILED.value
        if paid:
            self.paid_at = now
        self.updated_at = now

        self.raise_(
            PaymentSessionSettled(
                payment_session_id=str(self.id),
                order_group_id=self.order_group_id,
                customer_id=str(self.customer_id),
                gateway_session_id=gateway_session_id,
                status="paid" if paid else "failed",
                amount=settled_amount,
                settled_at=now,
            )
        )
        return True

    def expire(self):
        if self.status == PaymentSessionStatus.OPEN.value:
            self.status = PaymentSessionStatus.EXPIRED.value
            self.updated_at = datetime.now(UTC)

    def as_dict(self):
        return {
            "payment_session_id": str(self.id),
            "order_group_id": self.order_group_id,
            "customer_id": str(self.customer_id),
            "amount": self.amount,
            "currency": self.currency,
            "session_id": self.session_id,
            "session_url": self.session_url,
            "status": self.status,
            "attempts": [
                {
                    "session_id": a.session_id,
                    "status": a.status,
                    "amount": a.amount,
                    "created_at": a.created_at.isoformat() if a.created_at else None,
                }
                for a in sorted(self.attempts or [], key=lambda a: a.created_at or datetime.min.replace(tzinfo=UTC))
            ],
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
        }

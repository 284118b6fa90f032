"""Payment gateway port (abstract interface).

Payments are collected through hosted checkout pages: the platform creates
a session, redirects the customer to the gateway, and later learns the
outcome either by retrieving the session or from a signed webhook.
FakeGateway (dev/test) and StripeGateway (production) both implement this.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class WebhookVerificationError(Exception):
    """The webhook payload or its signature could not be verified."""


@dataclass(frozen=True)
class CheckoutSessionResult:
    """A hosted checkout session created at the gateway."""

    session_id: str
    url: str | None = None


@dataclass(frozen=True)
class SessionStatus:
    """The gateway's view of a checkout session."""

    session_id: str
    status: str | None = None  # open, complete, expired
    payment_status: str | None = None  # paid, unpaid, no_payment_required
    amount_total: int | None = None  # smallest currency unit
    metadata: dict = field(default_factory=dict)


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_checkout_session(
        self,
        line_items: list[dict],
        metadata: dict,
        customer_email: str | None,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionResult:
        """Create a hosted checkout session.

        `line_items` are dicts of `name`, `unit_amount` (fils) and `quantity`.
        """
        ...

    @abstractmethod
    def retrieve_session(self, session_id: str) -> SessionStatus:
        """Fetch the current state of a checkout session."""
        ...

    @abstractmethod
    def verify_webhook(self, payload: str | bytes, signature: str) -> dict:
        """Verify a webhook and return the decoded event.

        Raises:
            WebhookVerificationError: when the signature does not match.
        """
        ...

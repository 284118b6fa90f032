"""Stripe payment gateway adapter.

Uses Stripe Checkout: the customer pays on a Stripe-hosted page and the
outcome arrives through `checkout.session.completed` webhooks or by
retrieving the session on return to the success URL.
"""

import os

import stripe
import structlog

from payments.gateway.port import (
    CheckoutSessionResult,
    PaymentGateway,
    SessionStatus,
    WebhookVerificationError,
)

logger = structlog.get_logger(__name__)

CURRENCY = "aed"


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str, webhook_secret: str | None = None) -> None:
        if not api_key:
            raise ValueError("STRIPE_SECRET_KEY is missing")
        self.api_key = api_key.strip()
        self.webhook_secret = webhook_secret

    @classmethod
    def from_env(cls) -> "StripeGateway":
        return cls(
            api_key=os.environ.get("STRIPE_SECRET_KEY", ""),
            webhook_secret=os.environ.get("STRIPE_WEBHOOK_SECRET"),
        )

    def create_checkout_session(
        self,
        line_items: list[dict],
        metadata: dict,
        customer_email: str | None,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionResult:
        stripe.api_key = self.api_key
        params = {
            "payment_method_types": ["card"],
            "mode": "payment",
            "line_items": [
                {
                    "price_data": {
                        "currency": item.get("currency", CURRENCY).lower(),
                        "product_data": {"name": item["name"]},
                        "unit_amount": item["unit_amount"],
                    },
                    "quantity": item["quantity"],
                }
                for item in line_items
            ],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        }
        if customer_email:
            params["customer_email"] = customer_email

        session = stripe.checkout.Session.create(**params)
        logger.info("Stripe checkout session created", session_id=session.id)
        return CheckoutSessionResult(session_id=session.id, url=session.url)

    def retrieve_session(self, session_id: str) -> SessionStatus:
        stripe.api_key = self.api_key
        session = stripe.checkout.Session.retrieve(session_id)
        return SessionStatus(
            session_id=session.id,
            status=session.status,
            payment_status=session.payment_status,
            amount_total=session.amount_total,
            metadata=dict(session.metadata or {}),
        )

    def verify_webhook(self, payload: str | bytes, signature: str) -> dict:
        if not self.webhook_secret:
            raise WebhookVerificationError("STRIPE_WEBHOOK_SECRET is missing")
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise WebhookVerificationError(str(exc)) from exc
        return dict(event)

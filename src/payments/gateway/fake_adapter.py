"""Configurable fake payment gateway for development and testing.

Simulates hosted checkout sessions without external calls. Sessions live
in memory; whether they come back paid is configurable at runtime through
/payments/gateway/configure, which keeps manual API testing possible
without real gateway credentials.
"""

import json
from uuid import uuid4

from payments.gateway.port import (
    CheckoutSessionResult,
    PaymentGateway,
    SessionStatus,
    WebhookVerificationError,
)

FAKE_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.pays: bool = True
        self.failure_reason: str = "Checkout session could not be created"
        self.sessions: dict[str, dict] = {}
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        pays: bool = True,
        failure_reason: str = "Checkout session could not be created",
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.pays = pays
        self.failure_reason = failure_reason

    def create_checkout_session(
        self,
        line_items: list[dict],
        metadata: dict,
        customer_email: str | None,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionResult:
        self.calls.append(
            {
                "method": "create_checkout_session",
                "line_items": line_items,
                "metadata": metadata,
                "customer_email": customer_email,
                "success_url": success_url,
                "cancel_url": cancel_url,
            }
        )
        if not self.should_succeed:
            raise RuntimeError(self.failure_reason)

        session_id = f"cs_test_{uuid4().hex[:16]}"
        self.sessions[session_id] = {
            "metadata": dict(metadata),
            "amount_total": sum(item["unit_amount"] * item["quantity"] for item in line_items),
        }
        return CheckoutSessionResult(
            session_id=session_id,
            url=f"https://checkout.test/pay/{session_id}",
        )

    def retrieve_session(self, session_id: str) -> SessionStatus:
        self.calls.append({"method": "retrieve_session", "session_id": session_id})
        session = self.sessions.get(session_id, {})
        return SessionStatus(
            session_id=session_id,
            status="complete" if self.pays else "open",
            payment_status="paid" if self.pays else "unpaid",
            amount_total=session.get("amount_total"),
            metadata=session.get("metadata", {}),
        )

    def verify_webhook(self, payload: str | bytes, signature: str) -> dict:
        if signature != FAKE_SIGNATURE:
            raise WebhookVerificationError("Invalid webhook signature")
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        return json.loads(payload)

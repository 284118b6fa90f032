"""Gateway webhook processing for hosted checkout sessions.

The route verifies the signature; this handler only sees decoded events.
`checkout.session.completed` settles the group named in the session's
metadata once the gateway reports it paid. `checkout.session.expired`
expires it, and anything else is acknowledged without action.
"""

import json

import structlog
from protean import handle
from protean.fields import Text
from protean.utils.globals import current_domain

from payments.domain import payments
from payments.session.opening import session_for_group
from payments.session.session import PAID_GATEWAY_STATUSES, PaymentSession

logger = structlog.get_logger(__name__)

SESSION_COMPLETED = "checkout.session.completed"
SESSION_EXPIRED = "checkout.session.expired"


@payments.command(part_of="PaymentSession")
class HandleCheckoutWebhook:
    event = Text(required=True)  # JSON of the verified gateway event


@payments.command_handler(part_of=PaymentSession)
class CheckoutWebhookHandler:
    @handle(HandleCheckoutWebhook)
    def handle_checkout_webhook(self, command):
        event = json.loads(command.event)
        event_type = event.get("type")
        checkout = (event.get("data") or {}).get("object") or {}
        order_group_id = (checkout.get("metadata") or {}).get("orderGroupId")

        if event_type not in (SESSION_COMPLETED, SESSION_EXPIRED):
            logger.info("Webhook event ignored", event_type=event_type)
            return "ignored"

        session = session_for_group(order_group_id) if order_group_id else None
        if session is None:
            logger.warning("Webhook for unknown order group", event_type=event_type, order_group_id=order_group_id)
            return "ignored"

        repo = current_domain.repository_for(PaymentSession)
        if event_type == SESSION_EXPIRED:
            session.expire()
            repo.add(session)
            return "expired"

        if session.is_paid:
            return "already_paid"

        payment_status = checkout.get("payment_status") or "paid"
        if payment_status not in PAID_GATEWAY_STATUSES:
            logger.info("Completed checkout not paid yet", order_group_id=order_group_id, payment_status=payment_status)
            return "not_paid"

        amount_total = checkout.get("amount_total")
        session.settle(
            checkout.get("id") or session.session_id,
            payment_status,
            round(amount_total / 100, 2) if amount_total is not None else None,
        )
        repo.add(session)
        logger.info("Webhook settled payment session", order_group_id=order_group_id, status=session.status)
        return "processed"

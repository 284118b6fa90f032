"""Verifying a checkout session when the customer returns from the gateway."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from payments.domain import payments
from payments.gateway import get_gateway
from payments.session.opening import session_for_group
from payments.session.session import PAID_GATEWAY_STATUSES, PaymentSession
from shared.access import AccessDenied

logger = structlog.get_logger(__name__)


@payments.command(part_of="PaymentSession")
class VerifyPaymentSession:
    session_id = String(required=True, max_length=255)
    customer_id = Identifier(required=True)


def _session_by_gateway_id(gateway_session_id, metadata):
    sessions = (
        current_domain.repository_for(PaymentSession)
        ._dao.query.filter(session_id=gateway_session_id)
        .all()
        .items
    )
    if sessions:
        return sessions[0]

    # An older attempt of a retried group is matched through its metadata.
    order_group_id = (metadata or {}).get("orderGroupId")
    if order_group_id:
        session = session_for_group(order_group_id)
        if session is not None:
            return session
    raise ObjectNotFoundError(f"No payment session for checkout session {gateway_session_id}")


@payments.command_handler(part_of=PaymentSession)
class VerifyPaymentSessionHandler:
    @handle(VerifyPaymentSession)
    def verify_payment_session(self, command):
        status = get_gateway().retrieve_session(command.session_id)
        session = _session_by_gateway_id(command.session_id, status.metadata)

        if str(session.customer_id) != str(command.customer_id):
            raise AccessDenied("This checkout belongs to another customer")

        if session.is_paid:
            return {"order_group_id": session.order_group_id, "status": "paid", "amount": session.amount}

        amount = round(status.amount_total / 100, 2) if status.amount_total is not None else None
        session.settle(command.session_id, status.payment_status, amount)
        current_domain.repository_for(PaymentSession).add(session)

        logger.info(
            "Payment session verified",
            order_group_id=session.order_group_id,
            session_id=command.session_id,
            payment_status=status.payment_status,
        )
        return {
            "order_group_id": session.order_group_id,
            "status": "paid" if status.payment_status in PAID_GATEWAY_STATUSES else "failed",
            "payment_status": status.payment_status,
            "amount": session.amount,
        }

"""Payment retry — a fresh gateway session for an unpaid order group."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from payments.domain import payments
from payments.session.opening import create_gateway_session, session_for_group
from payments.session.session import PaymentSession
from shared.access import AccessDenied

logger = structlog.get_logger(__name__)


@payments.command(part_of="PaymentSession")
class RetryPaymentSession:
    order_group_id = String(required=True, max_length=8)
    customer_id = Identifier(required=True)


@payments.command_handler(part_of=PaymentSession)
class RetryPaymentSessionHandler:
    @handle(RetryPaymentSession)
    def retry_payment_session(self, command):
        session = session_for_group(command.order_group_id)
        if session is None:
            raise ObjectNotFoundError(f"No payment session for order group {command.order_group_id}")
        if str(session.customer_id) != str(command.customer_id):
            raise AccessDenied("This checkout belongs to another customer")
        if session.is_paid:
            raise ValidationError({"payment": ["Order is already paid"]})

        gateway_session = create_gateway_session(
            session.order_group_id, session.stored_line_items, session.customer_email
        )
        session.retry(gateway_session)
        current_domain.repository_for(PaymentSession).add(session)

        logger.info(
            "Payment session retried",
            order_group_id=session.order_group_id,
            session_id=gateway_session.session_id,
            attempts=len(session.attempts),
        )
        return {"session_id": gateway_session.session_id, "url": gateway_session.url}

"""Recording checkout payments against every order of a group.

Payments settles one hosted checkout session per order group and announces
the outcome with PaymentSessionSettled. Ordering applies it to each order
in the group; orders that are already paid stay paid.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, PaymentStatus
from shared.events.payments import PaymentSessionSettled

logger = structlog.get_logger(__name__)

ordering.register_external_event(PaymentSessionSettled, "Payments.PaymentSessionSettled.v1")


@ordering.command(part_of="Order")
class RecordGroupPayment:
    order_group_id = String(required=True, max_length=8)
    status = String(required=True, max_length=20)  # "paid" or "failed"
    transaction_ref = String(max_length=255)
    note = Text()


def orders_in_group(order_group_id):
    return (
        current_domain.repository_for(Order)._dao.query.filter(order_group_id=str(order_group_id)).all().items
    )


@ordering.command_handler(part_of=Order)
class RecordGroupPaymentHandler:
    @handle(RecordGroupPayment)
    def record_group_payment(self, command):
        if command.status not in (PaymentStatus.PAID.value, PaymentStatus.FAILED.value):
            raise ValidationError({"status": ["Must be paid or failed"]})

        orders = orders_in_group(command.order_group_id)
        if not orders:
            raise ValidationError({"order_group_id": ["No orders found for this group"]})

        repo = current_domain.repository_for(Order)
        updated = 0
        for order in orders:
            if order.is_paid:
                continue
            order.record_payment(command.status, transaction_ref=command.transaction_ref, note=command.note)
            repo.add(order)
            updated += 1

        logger.info(
            "Group payment recorded",
            order_group_id=command.order_group_id,
            status=command.status,
            orders_updated=updated,
        )
        return updated


@ordering.event_handler(part_of=Order, stream_category="payments::payment_session")
class PaymentEventsHandler:
    @handle(PaymentSessionSettled)
    def on_payment_session_settled(self, event: PaymentSessionSettled) -> None:
        logger.info(
            "Checkout session settled",
            order_group_id=event.order_group_id,
            status=event.status,
        )
        current_domain.process(
            RecordGroupPayment(
                order_group_id=event.order_group_id,
                status=event.status,
                transaction_ref=event.gateway_session_id,
            ),
            asynchronous=False,
        )

"""Customer invoices once a group's checkout is paid."""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from payments.domain import payments
from payments.invoice.generation import GenerateCustomerInvoice
from payments.invoice.invoice import Invoice, InvoiceType
from payments.projections.billable_order import BillableOrder
from payments.session.events import PaymentSessionSettled

logger = structlog.get_logger(__name__)


@payments.event_handler(part_of=Invoice, stream_category="payments::payment_session")
class PaymentSessionEventHandler:
    @handle(PaymentSessionSettled)
    def on_payment_session_settled(self, event: PaymentSessionSettled) -> None:
        if event.status != "paid":
            return

        repo = current_domain.repository_for(Invoice)
        existing = (
            repo._dao.query.filter(order_group_id=event.order_group_id, invoice_type=InvoiceType.CUSTOMER.value)
            .all()
            .items
        )
        if existing:
            invoice = existing[0]
            if not invoice.is_paid:
                invoice.mark_paid()
                repo.add(invoice)
            return

        orders = (
            current_domain.repository_for(BillableOrder)
            ._dao.query.filter(order_group_id=event.order_group_id)
            .all()
            .items
        )
        if not orders:
            logger.warning("Paid checkout has no billable orders", order_group_id=event.order_group_id)
            return

        logger.info("Issuing customer invoice for paid checkout", order_group_id=event.order_group_id)
        current_domain.process(
            GenerateCustomerInvoice(order_group_id=event.order_group_id, payment_status="paid"),
            asynchronous=False,
        )

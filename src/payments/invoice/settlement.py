"""Marking an invoice paid."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from payments.domain import payments
from payments.invoice.invoice import Invoice

logger = structlog.get_logger(__name__)


@payments.command(part_of="Invoice")
class MarkInvoicePaid:
    invoice_id = Identifier(required=True)


@payments.command_handler(part_of=Invoice)
class MarkInvoicePaidHandler:
    @handle(MarkInvoicePaid)
    def mark_invoice_paid(self, command):
        repo = current_domain.repository_for(Invoice)
        invoice = repo.get(command.invoice_id)
        invoice.mark_paid()
        repo.add(invoice)
        logger.info("Invoice marked paid", invoice_number=invoice.invoice_number)

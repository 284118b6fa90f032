"""Domain events for the Invoice aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from payments.domain import payments


@payments.event(part_of="Invoice")
class InvoiceIssued:
    """A numbered invoice was issued."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    invoice_number = String(required=True)
    invoice_type = String(required=True)
    order_id = Identifier()
    order_group_id = String()
    vendor_id = Identifier()
    customer_id = Identifier()
    total = Float(required=True)
    payment_status = String(required=True)
    issued_at = DateTime(required=True)


@payments.event(part_of="Invoice")
class InvoicePaid:
    """An invoice was settled."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    invoice_number = String(required=True)
    invoice_type = String(required=True)
    paid_at = DateTime(required=True)

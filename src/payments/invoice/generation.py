"""Invoice generation — vendor (admin) invoices and customer invoices."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from payments.domain import payments
from payments.invoice.invoice import Invoice, InvoicePaymentStatus, InvoiceType
from payments.invoice.numbering import next_invoice_number
from payments.invoice.parties import customer_details, invoice_terms, platform_details, vendor_details
from payments.projections.billable_order import BillableOrder

logger = structlog.get_logger(__name__)


@payments.command(part_of="Invoice")
class GenerateAdminInvoice:
    """The vendor's invoice to the platform for one order."""

    order_id = Identifier(required=True)
    comments = Text(sanitize=False)


@payments.command(part_of="Invoice")
class GenerateCustomerInvoice:
    """The platform's invoice to the customer for a whole order group."""

    order_group_id = String(required=True, max_length=8)
    comments = Text(sanitize=False)
    payment_status = String(max_length=10, default=InvoicePaymentStatus.UNPAID.value)


def _existing(**filters):
    invoices = current_domain.repository_for(Invoice)._dao.query.filter(**filters).all().items
    return invoices[0] if invoices else None


def admin_invoice_amounts(order):
    """Vendor-side amounts: the order total less commission, VAT at the vendor → platform rate."""
    total = order.total_amount or 0.0
    commission = order.admin_commission or 0.0
    shipping = order.total_shipping or 0.0
    packing = order.total_packing or 0.0
    vendor_total = total - commission

    vat_percent = order.vendor_vat_percent or 0.0
    vat_amount = (total - (order.vat_amount or 0.0)) * vat_percent / 100

    return {
        "subtotal": vendor_total - vat_amount - shipping - packing,
        "vat_percent": vat_percent,
        "vat_amount": vat_amount,
        "shipping_amount": shipping,
        "packing_amount": packing,
        "commission": commission,
        "total": vendor_total,
    }


def customer_invoice_amounts(orders):
    """Customer-side amounts summed over every order of the group."""
    amounts = {
        "subtotal": 0.0,
        "vat_percent": orders[0].vat_percent or 0.0,
        "vat_amount": 0.0,
        "shipping_amount": 0.0,
        "packing_amount": 0.0,
        "commission": 0.0,
        "total": 0.0,
    }
    for order in orders:
        total = order.total_amount or 0.0
        vat = order.vat_amount or 0.0
        shipping = order.total_shipping or 0.0
        packing = order.total_packing or 0.0
        amounts["total"] += total
        amounts["vat_amount"] += vat
        amounts["shipping_amount"] += shipping
        amounts["packing_amount"] += packing
        amounts["subtotal"] += total - vat - shipping - packing
    return amounts


@payments.command_handler(part_of=Invoice)
class GenerateInvoiceHandler:
    @handle(GenerateAdminInvoice)
    def generate_admin_invoice(self, command):
        existing = _existing(order_id=str(command.order_id), invoice_type=InvoiceType.ADMIN.value)
        if existing is not None:
            return str(existing.id)

        order = current_domain.repository_for(BillableOrder).get(str(command.order_id))
        if not order.vendor_id:
            raise ValidationError({"order_id": ["Orders sold by the platform have no vendor invoice"]})

        invoice = Invoice.issue(
            invoice_number=next_invoice_number(InvoiceType.ADMIN.value),
            invoice_type=InvoiceType.ADMIN.value,
            amounts=admin_invoice_amounts(order),
            line_items=[
                {
                    "description": item["product_name"],
                    "quantity": item["quantity"],
                    "unit_price": item.get("base_price") or item["price"],
                }
                for item in order.item_list
            ],
            addressee=platform_details(),
            issuer=vendor_details(order.vendor_id),
            order_id=order.order_id,
            order_group_id=order.order_group_id,
            vendor_id=order.vendor_id,
            customer_id=order.customer_id,
            comments=command.comments or order.invoice_comments,
            terms_conditions=invoice_terms(InvoiceType.ADMIN.value),
        )
        current_domain.repository_for(Invoice).add(invoice)

        logger.info(
            "Admin invoice generated",
            invoice_number=invoice.invoice_number,
            order_id=str(order.order_id),
            total=invoice.total,
        )
        return str(invoice.id)

    @handle(GenerateCustomerInvoice)
    def generate_customer_invoice(self, command):
        if command.payment_status not in (s.value for s in InvoicePaymentStatus):
            raise ValidationError({"payment_status": ["Must be 'paid' or 'unpaid'"]})

        existing = _existing(order_group_id=command.order_group_id, invoice_type=InvoiceType.CUSTOMER.value)
        if existing is not None:
            return str(existing.id)

        orders = (
            current_domain.repository_for(BillableOrder)
            ._dao.query.filter(order_group_id=command.order_group_id)
            .all()
            .items
        )
        if not orders:
            raise ObjectNotFoundError(f"No orders found for group {command.order_group_id}")
        orders = sorted(orders, key=lambda o: o.order_number or "")
        primary = orders[0]

        invoice = Invoice.issue(
            invoice_number=next_invoice_number(InvoiceType.CUSTOMER.value),
            invoice_type=InvoiceType.CUSTOMER.value,
            amounts=customer_invoice_amounts(orders),
            line_items=[
                {"description": item["product_name"], "quantity": item["quantity"], "unit_price": item["price"]}
                for order in orders
                for item in order.item_list
            ],
            addressee=customer_details(primary.customer_id, primary.address, primary.customer_email),
            issuer=platform_details(),
            payment_status=command.payment_status,
            order_group_id=command.order_group_id,
            customer_id=primary.customer_id,
            comments=command.comments,
            terms_conditions=invoice_terms(InvoiceType.CUSTOMER.value),
        )
        current_domain.repository_for(Invoice).add(invoice)

        logger.info(
            "Customer invoice generated",
            invoice_number=invoice.invoice_number,
            order_group_id=command.order_group_id,
            total=invoice.total,
            payment_status=invoice.payment_status,
        )
        return str(invoice.id)

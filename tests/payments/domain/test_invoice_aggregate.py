"""Domain tests for the Invoice aggregate and invoice arithmetic."""

import pytest
from payments.invoice.events import InvoiceIssued, InvoicePaid
from payments.invoice.generation import admin_invoice_amounts, customer_invoice_amounts
from payments.invoice.invoice import Invoice, InvoicePaymentStatus, InvoiceType
from payments.invoice.parties import format_address
from payments.projections.billable_order import BillableOrder
from protean.exceptions import ValidationError

PLATFORM = {"name": "SouqHub Marketplace LLC", "address": "Dubai, UAE", "email": None, "phone": None}
CUSTOMER = {"name": "Aisha Rahman", "address": "12 Marina Walk\nDubai\nUAE", "email": "aisha@example.com"}


def _issue(payment_status="unpaid"):
    return Invoice.issue(
        invoice_number="INV-2026-00001",
        invoice_type=InvoiceType.CUSTOMER.value,
        amounts={
            "subtotal": 200.0,
            "vat_percent": 5.0,
            "vat_amount": 11.5,
            "shipping_amount": 10.0,
            "packing_amount": 20.0,
            "commission": 0.0,
            "total": 241.5,
        },
        line_items=[{"description": "Ballistic Vest", "quantity": 2, "unit_price": 100.0}],
        addressee=CUSTOMER,
        issuer=PLATFORM,
        payment_status=payment_status,
        order_group_id="10000001",
        customer_id="cust-1",
    )


def _billable(**overrides):
    fields = {
        "order_id": "ord-1",
        "order_group_id": "10000001",
        "customer_id": "cust-1",
        "vendor_id": "vendor-1",
        "vat_percent": 5.0,
        "vendor_vat_percent": 5.0,
        "vat_amount": 11.5,
        "admin_commission": 20.0,
        "total_amount": 241.5,
        "total_shipping": 10.0,
        "total_packing": 20.0,
    }
    fields.update(overrides)
    return BillableOrder(**fields)


class TestIssue:
    def test_issue_sets_parties_and_amounts(self):
        invoice = _issue()

        assert invoice.addressee_name == "Aisha Rahman"
        assert invoice.issuer_name == "SouqHub Marketplace LLC"
        assert invoice.total == 241.5
        assert invoice.currency == "AED"
        assert invoice.payment_status == InvoicePaymentStatus.UNPAID.value

    def test_line_item_totals(self):
        invoice = _issue()

        assert len(invoice.line_items) == 1
        assert invoice.line_items[0].total == 200.0

    def test_access_token_is_64_hex_chars(self):
        invoice = _issue()

        assert len(invoice.access_token) == 64
        int(invoice.access_token, 16)
        assert invoice.access_token != _issue().access_token

    def test_paid_on_issue_stamps_paid_at(self):
        invoice = _issue(payment_status="paid")
        assert invoice.is_paid
        assert invoice.paid_at is not None

    def test_raises_issued_event(self):
        invoice = _issue()

        event = invoice._events[-1]
        assert isinstance(event, InvoiceIssued)
        assert event.invoice_number == "INV-2026-00001"
        assert event.invoice_type == "customer"


class TestMarkPaid:
    def test_mark_paid(self):
        invoice = _issue()

        invoice.mark_paid()

        assert invoice.is_paid
        assert isinstance(invoice._events[-1], InvoicePaid)

    def test_cannot_pay_twice(self):
        invoice = _issue(payment_status="paid")

        with pytest.raises(ValidationError) as exc_info:
            invoice.mark_paid()

        assert "Invoice is already paid" in exc_info.value.messages["payment_status"]


class TestAmounts:
    def test_admin_invoice_is_net_of_commission(self):
        amounts = admin_invoice_amounts(_billable())

        assert amounts["total"] == 221.5
        assert amounts["commission"] == 20.0

    def test_admin_invoice_vat_uses_vendor_rate(self):
        amounts = admin_invoice_amounts(_billable(vendor_vat_percent=0.0))

        assert amounts["vat_amount"] == 0.0
        assert amounts["subtotal"] == 191.5

    def test_admin_invoice_subtotal(self):
        amounts = admin_invoice_amounts(_billable())

        assert amounts["vat_amount"] == 11.5
        assert amounts["subtotal"] == 180.0

    def test_customer_invoice_sums_group(self):
        amounts = customer_invoice_amounts([_billable(), _billable(order_id="ord-2")])

        assert amounts["total"] == 483.0
        assert amounts["vat_amount"] == 23.0
        assert amounts["shipping_amount"] == 20.0
        assert amounts["packing_amount"] == 40.0
        assert amounts["subtotal"] == 400.0


class TestFormatAddress:
    def test_multi_line(self):
        address = {"street": "12 Marina Walk", "city": "Dubai", "postal_code": "00000", "country": "UAE"}
        assert format_address(address) == "12 Marina Walk\nDubai, 00000\nUAE"

    def test_empty(self):
        assert format_address({}) is None

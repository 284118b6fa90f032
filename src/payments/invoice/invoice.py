"""Invoice aggregate (CQRS) — vendor and customer invoices.

Two kinds of invoice are issued:

- admin: the vendor bills the platform for a delivered order, net of the
  platform's commission and with VAT at the vendor → platform rate.
- customer: the platform bills the customer once per order group, adding up
  every order of the checkout.

Invoices start unpaid (or paid, when the money was already collected) and
can be marked paid once. Each carries a random access token so it can be
shared through a public link.

Free text is stored as entered. Escaping happens once, when the invoice is
rendered to HTML.
"""

import secrets
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, String, Text

from payments.domain import payments
from payments.invoice.events import InvoiceIssued, InvoicePaid


class InvoiceType(Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


class InvoicePaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"


@payments.entity(part_of="Invoice")
class InvoiceLineItem:
    """A line item on an invoice."""

    description = String(required=True, max_length=500, sanitize=False)
    quantity = Float(required=True)
    unit_price = Float(required=True)
    total = Float(required=True)


@payments.aggregate
class Invoice:
    invoice_number = String(required=True, max_length=20)
    invoice_type = String(required=True, choices=InvoiceType)
    order_id = Identifier()
    order_group_id = String(max_length=8)
    vendor_id = Identifier()
    customer_id = Identifier()

    addressee_name = String(max_length=255, sanitize=False)
    addressee_address = Text(sanitize=False)
    addressee_email = String(max_length=254, sanitize=False)
    addressee_phone = String(max_length=30, sanitize=False)
    issuer_name = String(max_length=255, sanitize=False)
    issuer_address = Text(sanitize=False)
    issuer_email = String(max_length=254, sanitize=False)
    issuer_phone = String(max_length=30, sanitize=False)

    line_items = HasMany(InvoiceLineItem)
    subtotal = Float(default=0.0)
    vat_percent = Float(default=0.0)
    vat_amount = Float(default=0.0)
    shipping_amount = Float(default=0.0)
    packing_amount = Float(default=0.0)
    commission = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="AED")

    payment_status = String(choices=InvoicePaymentStatus, default=InvoicePaymentStatus.UNPAID.value)
    access_token = String(required=True, max_length=64)
    comments = Text(sanitize=False)
    terms_conditions = Text(sanitize=False)
    issued_at = DateTime()
    paid_at = DateTime()

    @classmethod
    def issue(cls, invoice_number, invoice_type, amounts, line_items, addressee, issuer, payment_status="unpaid",
              order_id=None, order_group_id=None, vendor_id=None, customer_id=None, comments=None,
              terms_conditions=None):
        """Create a numbered invoice.

        Args:
            amounts: dict of subtotal, vat_percent, vat_amount, shipping_amount,
                packing_amount, commission and total.
            line_items: list of {description, quantity, unit_price}.
            addressee, issuer: dicts of name, address, email and phone.
        """
        now = datetime.now(UTC)
        invoice = cls(
            invoice_number=invoice_number,
            invoice_type=invoice_type,
            order_id=order_id,
            order_group_id=order_group_id,
            vendor_id=vendor_id,
            customer_id=customer_id,
            addressee_name=addressee.get("name"),
            addressee_address=addressee.get("address"),
            addressee_email=addressee.get("email"),
            addressee_phone=addressee.get("phone"),
            issuer_name=issuer.get("name"),
            issuer_address=issuer.get("address"),
            issuer_email=issuer.get("email"),
            issuer_phone=issuer.get("phone"),
            currency="AED",
            payment_status=payment_status,
            access_token=secrets.token_hex(32),
            comments=comments,
            terms_conditions=terms_conditions,
            issued_at=now,
            paid_at=now if payment_status == InvoicePaymentStatus.PAID.value else None,
            **{key: round(value or 0.0, 2) for key, value in amounts.items()},
        )
        for item in line_items:
            invoice.add_line_items(
                InvoiceLineItem(
                    description=item["description"],
                    quantity=item["quantity"],
                    unit_price=round(item["unit_price"], 2),
                    total=round(item["quantity"] * item["unit_price"], 2),
                )
            )

        invoice.raise_(
            InvoiceIssued(
                invoice_id=str(invoice.id),
                invoice_number=invoice_number,
                invoice_type=invoice_type,
                order_id=str(order_id) if order_id else None,
                order_group_id=order_group_id,
                vendor_id=str(vendor_id) if vendor_id else None,
                customer_id=str(customer_id) if customer_id else None,
                total=invoice.total,
                payment_status=payment_status,
                issued_at=now,
            )
        )
        return invoice

    @property
    def is_paid(self):
        return self.payment_status == InvoicePaymentStatus.PAID.value

    def mark_paid(self) -> None:
        if self.is_paid:
            raise ValidationError({"payment_status": ["Invoice is already paid"]})

        now = datetime.now(UTC)
        self.payment_status = InvoicePaymentStatus.PAID.value
        self.paid_at = now
        self.raise_(
            InvoicePaid(
                invoice_id=str(self.id),
                invoice_number=self.invoice_number,
                invoice_type=self.invoice_type,
                paid_at=now,
            )
        )

    def as_dict(self, include_token=False):
        data = {
            "invoice_id": str(self.id),
            "invoice_number": self.invoice_number,
            "invoice_type": self.invoice_type,
            "order_id": str(self.order_id) if self.order_id else None,
            "order_group_id": self.order_group_id,
            "vendor_id": str(self.vendor_id) if self.vendor_id else None,
            "customer_id": str(self.customer_id) if self.customer_id else None,
            "addressee": {
                "name": self.addressee_name,
                "address": self.addressee_address,
                "email": self.addressee_email,
                "phone": self.addressee_phone,
            },
            "issuer": {
                "name": self.issuer_name,
                "address": self.issuer_address,
                "email": self.issuer_email,
                "phone": self.issuer_phone,
            },
            "line_items": [
                {
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "total": item.total,
                }
                for item in self.line_items or []
            ],
            "subtotal": self.subtotal,
            "vat_percent": self.vat_percent,
            "vat_amount": self.vat_amount,
            "shipping_amount": self.shipping_amount,
            "packing_amount": self.packing_amount,
            "commission": self.commission,
            "total": self.total,
            "currency": self.currency,
            "payment_status": self.payment_status,
            "comments": self.comments,
            "terms_conditions": self.terms_conditions,
            "issued_at": self.issued_at.isoformat() if self.issued_at else None,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
        }
        if include_token:
            data["access_token"] = self.access_token
        return data

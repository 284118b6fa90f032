"""Billable orders — the order data invoices are issued from, owned by Payments.

Filled from OrderGroupPlaced when a checkout happens, and stamped with the
delivery time and vendor comments when the order is delivered.
"""

import json

from protean.fields import DateTime, Float, Identifier, String, Text

from payments.domain import payments


@payments.projection
class BillableOrder:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(max_length=20)
    order_group_id = String(required=True, max_length=8)
    order_type = String(max_length=10)
    customer_id = Identifier(required=True)
    customer_email = String(max_length=254)
    customer_country = String(max_length=100)
    shipping_address = Text()  # JSON
    vendor_id = Identifier()
    vendor_country = String(max_length=100)
    items = Text(default="[]")  # JSON list of order item dicts
    vat_percent = Float(default=0.0)
    vendor_vat_percent = Float(default=0.0)
    vat_amount = Float(default=0.0)
    admin_commission = Float(default=0.0)
    total_amount = Float(default=0.0)
    total_shipping = Float(default=0.0)
    total_packing = Float(default=0.0)
    currency = String(max_length=3, default="AED")
    invoice_comments = Text(sanitize=False)
    placed_at = DateTime()
    delivered_at = DateTime()

    @property
    def item_list(self):
        return json.loads(self.items or "[]")

    @property
    def address(self):
        return json.loads(self.shipping_address or "{}")

"""Cross-domain event contracts for Ordering domain events.

Payments opens hosted checkout sessions and issues invoices from these,
and Finance credits vendor earnings when a vendor dispatches an order.
They are registered as external events via domain.register_external_event()
with matching __type__ strings so Protean's stream deserialization works
correctly.

The source-of-truth events are in src/ordering/order/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String, Text


class OrderGroupPlaced(BaseEvent):
    """A checkout split the cart into one order per vendor.

    `orders` is a JSON list, one entry per order:
    {order_id, order_number, vendor_id, vendor_country, vat_percent,
     vendor_vat_percent, vat_amount, admin_commission, total_amount,
     total_shipping, total_packing, items: [{product_id, product_name,
     quantity, price, base_price, packing_charge, shipping_charge,
     is_controlled}]}
    """

    __version__ = 1

    order_group_id = String(required=True)
    customer_id = Identifier(required=True)
    customer_email = String()
    customer_country = String()
    shipping_address = Text()  # JSON
    order_type = String(required=True)
    orders = Text(required=True)
    grand_total = Float(required=True)
    currency = String(default="AED")
    placed_at = DateTime(required=True)


class VendorOrderDispatched(BaseEvent):
    """A paid vendor order left the vendor's premises."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total_amount = Float(required=True)
    dispatched_at = DateTime(required=True)


class OrderDelivered(BaseEvent):
    """An order reached the customer."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    order_group_id = String(required=True)
    vendor_id = Identifier()
    vendor_country = String()
    vendor_vat_percent = Float(default=0.0)
    customer_id = Identifier(required=True)
    customer_country = String()
    items = Text(required=True)  # JSON list of item dicts
    total_amount = Float(required=True)
    vat_amount = Float(default=0.0)
    admin_commission = Float(default=0.0)
    total_shipping = Float(default=0.0)
    total_packing = Float(default=0.0)
    invoice_comments = Text(sanitize=False)
    delivered_at = DateTime(required=True)

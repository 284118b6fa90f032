"""Domain events for the Order and OrderGroup aggregates."""

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="OrderGroup")
class OrderGroupPlaced:
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


@ordering.event(part_of="Order")
class OrderPlaced:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    order_group_id = String(required=True)
    customer_id = Identifier(required=True)
    vendor_id = Identifier()
    order_type = String(required=True)
    total_amount = Float(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = String()
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaymentStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    order_group_id = String(required=True)
    previous_status = String()
    new_status = String(required=True)
    transaction_ref = String()
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderShipmentStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    tracking_number = String()
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class VendorOrderDispatched:
    """A paid vendor order left the vendor's premises."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total_amount = Float(required=True)
    dispatched_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
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


@ordering.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    reason = String()
    cancelled_by = String()
    cancelled_at = DateTime(required=True)

"""OrderGroup aggregate — one checkout, spanning one order per vendor.

Customers see their purchases grouped by checkout, and payment happens once
per group, so the group keeps the order ids and the grand total.
"""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering
from ordering.order.events import OrderGroupPlaced


@ordering.aggregate
class OrderGroup:
    order_group_id = String(identifier=True, max_length=8)
    customer_id = Identifier(required=True)
    order_type = String(max_length=10, default="direct")
    order_ids = Text(default="[]")  # JSON list
    grand_total = Float(default=0.0)
    currency = String(max_length=3, default="AED")
    created_at = DateTime()

    @classmethod
    def place(cls, order_group_id, customer_id, customer_email, order_type, orders):
        """Record the checkout and announce it to Payments.

        Args:
            orders: Placed Order aggregates belonging to this group.
        """
        now = datetime.now(UTC)
        grand_total = round(sum(order.total_amount for order in orders), 2)
        group = cls(
            order_group_id=order_group_id,
            customer_id=customer_id,
            order_type=order_type,
            order_ids=json.dumps([str(order.id) for order in orders]),
            grand_total=grand_total,
            currency="AED",
            created_at=now,
        )

        summary = [
            {
                "order_id": str(order.id),
                "order_number": order.order_number,
                "vendor_id": str(order.vendor_id) if order.vendor_id else None,
                "vendor_country": order.vendor_country,
                "vat_percent": order.vat_percent,
                "vendor_vat_percent": order.vendor_vat_percent,
                "vat_amount": order.vat_amount,
                "admin_commission": order.admin_commission,
                "total_amount": order.total_amount,
                "total_shipping": order.total_shipping,
                "total_packing": order.total_packing,
                "items": [item.as_dict() for item in order.items],
            }
            for order in orders
        ]
        group.raise_(
            OrderGroupPlaced(
                order_group_id=order_group_id,
                customer_id=str(customer_id),
                customer_email=customer_email,
                customer_country=orders[0].customer_country if orders else None,
                shipping_address=orders[0].shipping_address if orders else None,
                order_type=order_type,
                orders=json.dumps(summary),
                grand_total=grand_total,
                currency="AED",
                placed_at=now,
            )
        )
        return group

    @property
    def ids(self):
        return json.loads(self.order_ids or "[]")

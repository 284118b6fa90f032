"""Orders as Fulfillment sees them — who ships, and where to.

Filled from OrderGroupPlaced so shipments can default the customer's
delivery address without reaching into Ordering.
"""

import json

from protean.fields import DateTime, Identifier, Integer, String, Text

from fulfillment.domain import fulfillment


@fulfillment.projection
class ShippableOrder:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(max_length=20)
    order_group_id = String(max_length=8)
    customer_id = Identifier(required=True)
    vendor_id = Identifier()
    vendor_country = String(max_length=100)
    shipping_address = Text()  # JSON
    item_count = Integer(default=0)
    placed_at = DateTime()

    @property
    def address(self):
        return json.loads(self.shipping_address or "{}")

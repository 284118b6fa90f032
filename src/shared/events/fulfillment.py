"""Cross-domain event contracts for Fulfillment domain events.

Ordering copies tracking details onto the order when a carrier label is
created and moves the order's shipment along when the carrier reports
delivery. `leg` tells the vendor-to-warehouse parcel apart from the
warehouse-to-customer one.

The source-of-truth events are in src/fulfillment/shipment/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String


class ShipmentLabelCreated(BaseEvent):
    """The carrier accepted a shipment and issued a label."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    carrier = String(required=True)
    tracking_number = String(required=True)
    label_url = String()
    carrier_shipment_id = String()
    leg = String(default="admin_to_customer")
    created_at = DateTime(required=True)


class ShipmentDelivered(BaseEvent):
    """The carrier confirmed delivery."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    leg = String(default="admin_to_customer")
    delivered_at = DateTime(required=True)

"""Domain events for the Shipment aggregate.

ShipmentLabelCreated and ShipmentDelivered are consumed by Ordering; the
matching contracts live in src/shared/events/fulfillment.py.
"""

from protean.fields import DateTime, Identifier, String

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="Shipment")
class ShipmentLabelCreated:
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


@fulfillment.event(part_of="Shipment")
class ShipmentTrackingUpdated:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    code = String()
    status = String(required=True)
    location = String()
    description = String()
    occurred_at = DateTime(required=True)


@fulfillment.event(part_of="Shipment")
class PickupScheduled:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    confirmation_code = String(required=True)
    pickup_date = String(required=True)
    scheduled_at = DateTime(required=True)


@fulfillment.event(part_of="Shipment")
class ShipmentDelivered:
    """The carrier confirmed delivery."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    leg = String(default="admin_to_customer")
    delivered_at = DateTime(required=True)


@fulfillment.event(part_of="Shipment")
class ShipmentCancelled:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)

"""Shipment aggregate (CQRS) — one carrier booking for one leg of an order.

A marketplace order travels in up to two legs: the vendor ships to the
platform warehouse, then the platform ships to the customer. Each leg is a
Shipment with its own tracking number and label.

Status follows the carrier's reports and never moves backwards:
    LABEL_CREATED → PICKED_UP → IN_TRANSIT ⇄ EXCEPTION → DELIVERED
    LABEL_CREATED → CANCELLED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from fulfillment.domain import fulfillment
from fulfillment.shipment.events import (
    PickupScheduled,
    ShipmentCancelled,
    ShipmentDelivered,
    ShipmentLabelCreated,
    ShipmentTrackingUpdated,
)


class ShipmentStatus(Enum):
    LABEL_CREATED = "label_created"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    EXCEPTION = "exception"
    CANCELLED = "cancelled"


class ShipmentLeg(Enum):
    VENDOR_TO_ADMIN = "vendor_to_admin"
    ADMIN_TO_CUSTOMER = "admin_to_customer"


_PROGRESS = {
    ShipmentStatus.LABEL_CREATED: 0,
    ShipmentStatus.PICKED_UP: 1,
    ShipmentStatus.IN_TRANSIT: 2,
    ShipmentStatus.EXCEPTION: 2,
    ShipmentStatus.DELIVERED: 3,
}

# Carrier scan codes (FedEx event types)
TRACKING_CODES = {
    "PU": ShipmentStatus.PICKED_UP,
    "PK": ShipmentStatus.PICKED_UP,
    "IT": ShipmentStatus.IN_TRANSIT,
    "AR": ShipmentStatus.IN_TRANSIT,
    "AF": ShipmentStatus.IN_TRANSIT,
    "DP": ShipmentStatus.IN_TRANSIT,
    "OD": ShipmentStatus.IN_TRANSIT,
    "CC": ShipmentStatus.IN_TRANSIT,
    "DL": ShipmentStatus.DELIVERED,
    "DE": ShipmentStatus.EXCEPTION,
    "SE": ShipmentStatus.EXCEPTION,
    "DY": ShipmentStatus.EXCEPTION,
}


def status_for_code(code):
    """The shipment status a carrier scan code implies, or None when it implies none."""
    if not code:
        return None
    code = code.strip()
    if code.upper() in TRACKING_CODES:
        return TRACKING_CODES[code.upper()]
    try:
        status = ShipmentStatus(code.lower())
    except ValueError:
        return None
    return status if status != ShipmentStatus.CANCELLED else None


@fulfillment.entity(part_of="Shipment")
class TrackingEvent:
    """A carrier tracking event."""

    code = String(max_length=10)
    status = String(required=True, max_length=50)
    location = String(max_length=200)
    description = String(max_length=500)
    occurred_at = DateTime(required=True)

    def as_dict(self):
        return {
            "code": self.code,
            "status": self.status,
            "location": self.location,
            "description": self.description,
            "occurred_at": self.occurred_at.isoformat() if self.occurred_at else None,
        }


@fulfillment.aggregate
class Shipment:
    order_id = Identifier(required=True)
    vendor_id = Identifier()
    leg = String(max_length=20, choices=ShipmentLeg, default=ShipmentLeg.ADMIN_TO_CUSTOMER.value)
    carrier = String(required=True, max_length=50)
    service_type = String(max_length=100)
    tracking_number = String(required=True, max_length=100)
    label_url = String(max_length=1000)
    carrier_shipment_id = String(max_length=100)
    status = String(choices=ShipmentStatus, default=ShipmentStatus.LABEL_CREATED.value)
    weight_kg = Float(min_value=0.0)
    package_count = Integer(min_value=1, default=1)
    origin = Text()  # JSON {address, contact} the carrier collects from
    pickup_confirmation = String(max_length=100)
    pickup_date = String(max_length=10)
    tracking_events = HasMany(TrackingEvent)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    delivered_at = DateTime()

    @classmethod
    def book(
        cls,
        order_id,
        carrier,
        tracking_number,
        label_url=None,
        carrier_shipment_id=None,
        vendor_id=None,
        leg=ShipmentLeg.ADMIN_TO_CUSTOMER.value,
        service_type=None,
        weight_kg=None,
        package_count=1,
        origin=None,
    ):
        """Record a shipment the carrier has just accepted."""
        now = datetime.now(UTC)
        shipment = cls(
            order_id=order_id,
            vendor_id=vendor_id,
            leg=leg,
            carrier=carrier,
            service_type=service_type,
            tracking_number=tracking_number,
            label_url=label_url,
            carrier_shipment_id=carrier_shipment_id,
            weight_kg=weight_kg,
            package_count=package_count,
            origin=json.dumps(origin) if origin else None,
            status=ShipmentStatus.LABEL_CREATED.value,
            created_at=now,
            updated_at=now,
        )
        shipment.raise_(
            ShipmentLabelCreated(
                shipment_id=str(shipment.id),
                order_id=str(order_id),
                carrier=carrier,
                tracking_number=tracking_number,
                label_url=label_url,
                carrier_shipment_id=carrier_shipment_id,
                leg=leg,
                created_at=now,
            )
        )
        return shipment

    @property
    def origin_details(self):
        return json.loads(self.origin or "{}")

    @property
    def is_cancelled(self):
        return self.status == ShipmentStatus.CANCELLED.value

    def record_tracking(self, code=None, description=None, location=None, occurred_at=None, status=None):
        """Append a carrier scan and move the status forward when the scan implies it.

        Scans that arrive out of order are kept in the history but never
        move the status backwards.
        """
        if self.is_cancelled:
            raise ValidationError({"status": ["Shipment is cancelled"]})

        current = ShipmentStatus(self.status)
        reported = status or status_for_code(code)
        if reported is not None and _PROGRESS[reported] >= _PROGRESS[current]:
            self.status = reported.value

        occurred_at = occurred_at or datetime.now(UTC)
        self.add_tracking_events(
            TrackingEvent(
                code=code,
                status=(reported or current).value,
                location=location,
                description=description,
                occurred_at=occurred_at,
            )
        )
        self.updated_at = datetime.now(UTC)
        self.raise_(
            ShipmentTrackingUpdated(
                shipment_id=str(self.id),
                order_id=str(self.order_id),
                tracking_number=self.tracking_number,
                code=code,
                status=self.status,
                location=location,
                description=description,
                occurred_at=occurred_at,
            )
        )

        if self.status == ShipmentStatus.DELIVERED.value and current != ShipmentStatus.DELIVERED:
            self.delivered_at = occurred_at
            self.raise_(
                ShipmentDelivered(
                    shipment_id=str(self.id),
                    order_id=str(self.order_id),
                    tracking_number=self.tracking_number,
                    leg=self.leg,
                    delivered_at=occurred_at,
                )
            )

    def _assert_awaiting_pickup(self, action):
        if self.status != ShipmentStatus.LABEL_CREATED.value:
            raise ValidationError({"status": [f"Cannot {action} a shipment that is {self.status}"]})

    def schedule_pickup(self, confirmation_code, pickup_date):
        self._assert_awaiting_pickup("schedule a pickup for")
        now = datetime.now(UTC)
        self.pickup_confirmation = confirmation_code
        self.pickup_date = pickup_date
        self.updated_at = now
        self.raise_(
            PickupScheduled(
                shipment_id=str(self.id),
                order_id=str(self.order_id),
                confirmation_code=confirmation_code,
                pickup_date=pickup_date,
                scheduled_at=now,
            )
        )

    def cancel(self, reason=None):
        self._assert_awaiting_pickup("cancel")
        now = datetime.now(UTC)
        self.status = ShipmentStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.updated_at = now
        self.raise_(
            ShipmentCancelled(
                shipment_id=str(self.id),
                order_id=str(self.order_id),
                tracking_number=self.tracking_number,
                reason=reason,
                cancelled_at=now,
            )
        )

    def as_dict(self):
        return {
            "id": str(self.id),
            "order_id": str(self.order_id),
            "vendor_id": str(self.vendor_id) if self.vendor_id else None,
            "leg": self.leg,
            "carrier": self.carrier,
            "service_type": self.service_type,
            "tracking_number": self.tracking_number,
            "label_url": self.label_url,
            "carrier_shipment_id": self.carrier_shipment_id,
            "status": self.status,
            "weight_kg": self.weight_kg,
            "package_count": self.package_count,
            "pickup_confirmation": self.pickup_confirmation,
            "pickup_date": self.pickup_date,
            "cancellation_reason": self.cancellation_reason,
            "tracking_events": [
                e.as_dict() for e in sorted(self.tracking_events, key=lambda e: e.occurred_at)
            ],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "delivered_at": self.delivered_at.isoformat() if self.delivered_at else None,
        }

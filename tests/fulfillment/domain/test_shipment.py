"""Tests for the Shipment aggregate — booking, tracking, pickup and cancellation."""

from datetime import UTC, datetime, timedelta

import pytest
from fulfillment.shipment.events import (
    PickupScheduled,
    ShipmentCancelled,
    ShipmentDelivered,
    ShipmentLabelCreated,
    ShipmentTrackingUpdated,
)
from fulfillment.shipment.shipment import Shipment, ShipmentStatus, status_for_code
from protean.exceptions import ValidationError


def _book():
    return Shipment.book(
        order_id="ord-001",
        carrier="fake",
        tracking_number="FAKE-0001",
        label_url="https://labels.example.com/0001.pdf",
        carrier_shipment_id="ship-0001",
        vendor_id="vendor-1",
        leg="vendor_to_admin",
        weight_kg=2.5,
        origin={"address": {"city": "Dubai"}, "contact": {"name": "Falcon"}},
    )


def _events(shipment, event_cls):
    return [e for e in shipment._events if isinstance(e, event_cls)]


class TestBooking:
    def test_starts_with_label_created(self):
        shipment = _book()
        assert shipment.status == ShipmentStatus.LABEL_CREATED.value
        assert shipment.origin_details["address"]["city"] == "Dubai"

    def test_raises_label_created(self):
        shipment = _book()
        events = _events(shipment, ShipmentLabelCreated)
        assert len(events) == 1
        assert events[0].order_id == "ord-001"
        assert events[0].tracking_number == "FAKE-0001"
        assert events[0].carrier == "fake"
        assert events[0].leg == "vendor_to_admin"


class TestStatusForCode:
    @pytest.mark.parametrize(
        "code,status",
        [
            ("PU", ShipmentStatus.PICKED_UP),
            ("PK", ShipmentStatus.PICKED_UP),
            ("IT", ShipmentStatus.IN_TRANSIT),
            ("od", ShipmentStatus.IN_TRANSIT),
            ("DL", ShipmentStatus.DELIVERED),
            ("DE", ShipmentStatus.EXCEPTION),
            ("in_transit", ShipmentStatus.IN_TRANSIT),
        ],
    )
    def test_known_codes(self, code, status):
        assert status_for_code(code) == status

    def test_unknown_code_implies_nothing(self):
        assert status_for_code("XX") is None
        assert status_for_code(None) is None

    def test_cancelled_is_not_a_tracking_status(self):
        assert status_for_code("cancelled") is None


class TestTracking:
    def test_scan_moves_status_forward(self):
        shipment = _book()
        shipment.record_tracking(code="PU", description="Picked up", location="Dubai, AE")

        assert shipment.status == ShipmentStatus.PICKED_UP.value
        assert len(shipment.tracking_events) == 1
        assert shipment.tracking_events[0].code == "PU"

    def test_raises_tracking_updated(self):
        shipment = _book()
        shipment.record_tracking(code="IT", location="Dubai Hub, AE")

        events = _events(shipment, ShipmentTrackingUpdated)
        assert len(events) == 1
        assert events[0].status == "in_transit"
        assert events[0].location == "Dubai Hub, AE"

    def test_late_scan_does_not_move_status_backwards(self):
        shipment = _book()
        shipment.record_tracking(code="IT")
        shipment.record_tracking(code="PU")

        assert shipment.status == ShipmentStatus.IN_TRANSIT.value
        assert len(shipment.tracking_events) == 2

    def test_exception_and_recovery(self):
        shipment = _book()
        shipment.record_tracking(code="IT")
        shipment.record_tracking(code="DE", description="Address incomplete")
        assert shipment.status == ShipmentStatus.EXCEPTION.value

        shipment.record_tracking(code="IT")
        assert shipment.status == ShipmentStatus.IN_TRANSIT.value

    def test_unknown_code_keeps_status(self):
        shipment = _book()
        shipment.record_tracking(code="XX", description="Weather delay")

        assert shipment.status == ShipmentStatus.LABEL_CREATED.value
        assert shipment.tracking_events[0].status == "label_created"

    def test_delivery_raises_delivered_once(self):
        shipment = _book()
        delivered_at = datetime.now(UTC)
        shipment.record_tracking(code="DL", occurred_at=delivered_at)
        shipment.record_tracking(code="DL", occurred_at=delivered_at + timedelta(minutes=5))

        events = _events(shipment, ShipmentDelivered)
        assert len(events) == 1
        assert events[0].delivered_at == delivered_at
        assert events[0].leg == "vendor_to_admin"
        assert shipment.delivered_at == delivered_at

    def test_cancelled_shipment_rejects_scans(self):
        shipment = _book()
        shipment.cancel("Vendor out of stock")

        with pytest.raises(ValidationError) as exc:
            shipment.record_tracking(code="PU")
        assert "Shipment is cancelled" in exc.value.messages["status"]


class TestPickupAndCancellation:
    def test_schedule_pickup(self):
        shipment = _book()
        shipment.schedule_pickup("PU-1234", "2026-10-21")

        assert shipment.pickup_confirmation == "PU-1234"
        assert shipment.pickup_date == "2026-10-21"
        assert _events(shipment, PickupScheduled)[0].confirmation_code == "PU-1234"

    def test_pickup_after_collection_rejected(self):
        shipment = _book()
        shipment.record_tracking(code="PU")

        with pytest.raises(ValidationError):
            shipment.schedule_pickup("PU-1234", "2026-10-21")

    def test_cancel(self):
        shipment = _book()
        shipment.cancel("Wrong address")

        assert shipment.status == ShipmentStatus.CANCELLED.value
        assert shipment.cancellation_reason == "Wrong address"
        assert _events(shipment, ShipmentCancelled)[0].reason == "Wrong address"

    def test_cancel_in_transit_rejected(self):
        shipment = _book()
        shipment.record_tracking(code="IT")

        with pytest.raises(ValidationError) as exc:
            shipment.cancel()
        assert "Cannot cancel a shipment that is in_transit" in exc.value.messages["status"]

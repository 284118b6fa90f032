"""Integration tests for the shipment endpoints."""

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from fulfillment.api import shipment_router
from fulfillment.carrier import set_carrier
from fulfillment.carrier.fedex_adapter import FedExCarrier
from protean.integrations.fastapi import register_exception_handlers
from shared.access import register_access_handlers

ORDER_MANAGER = {"X-Actor-Id": "admin-1", "X-Actor-Type": "admin", "X-Actor-Permissions": "order.manage"}
ORDER_VIEWER = {"X-Actor-Id": "admin-2", "X-Actor-Type": "admin", "X-Actor-Permissions": "order.view"}
VENDOR = {"X-Actor-Id": "vendor-1", "X-Actor-Type": "vendor"}
OTHER_VENDOR = {"X-Actor-Id": "vendor-2", "X-Actor-Type": "vendor"}
CUSTOMER = {"X-Actor-Id": "cust-1", "X-Actor-Type": "customer"}
OTHER_CUSTOMER = {"X-Actor-Id": "cust-2", "X-Actor-Type": "customer"}

VENDOR_PICKUP = {
    "from_address": {"street_lines": ["Unit 7, Jebel Ali Free Zone"], "city": "Dubai", "country_code": "AE"},
    "from_contact": {"name": "Falcon Tactical", "phone": "+971500000000"},
}


@pytest.fixture()
def client(placed_order):
    placed_order()
    app = FastAPI()
    app.include_router(shipment_router)
    register_exception_handlers(app)
    register_access_handlers(app)
    return TestClient(app)


def _book(client, headers=ORDER_MANAGER, **body):
    body.setdefault("order_id", "ord-1")
    return client.post("/shipments", json=body, headers=headers)


class TestCreateShipment:
    def test_admin_books_customer_leg(self, client):
        response = _book(client)

        assert response.status_code == 201
        assert response.json()["tracking_number"].startswith("FAKE-")
        assert response.json()["label_url"]

    def test_vendor_books_first_leg(self, client):
        response = _book(client, headers=VENDOR, leg="vendor_to_admin", weight_kg=4.5, **VENDOR_PICKUP)

        assert response.status_code == 201

    def test_vendor_cannot_book_customer_leg(self, client):
        assert _book(client, headers=VENDOR).status_code == 403

    def test_other_vendor_denied(self, client):
        response = _book(client, headers=OTHER_VENDOR, leg="vendor_to_admin", **VENDOR_PICKUP)
        assert response.status_code == 403

    def test_customer_denied(self, client):
        assert _book(client, headers=CUSTOMER).status_code == 403

    def test_viewer_denied(self, client):
        assert _book(client, headers=ORDER_VIEWER).status_code == 403

    def test_carrier_failure_is_400(self, client, carrier):
        carrier.configure(should_succeed=False, failure_reason="Service unavailable")

        response = _book(client)

        assert response.status_code == 400

    def test_unknown_order_is_404(self, client):
        assert _book(client, order_id="ord-missing").status_code == 404

    def test_invalid_leg_rejected(self, client):
        assert _book(client, leg="sideways").status_code == 422


class TestViewingShipments:
    def test_order_shipments_visible_to_parties(self, client):
        _book(client)

        for headers in (ORDER_VIEWER, VENDOR, CUSTOMER):
            response = client.get("/shipments/order/ord-1", headers=headers)
            assert response.status_code == 200
            assert len(response.json()["shipments"]) == 1

    def test_order_shipments_hidden_from_others(self, client):
        _book(client)

        assert client.get("/shipments/order/ord-1", headers=OTHER_VENDOR).status_code == 403
        assert client.get("/shipments/order/ord-1", headers=OTHER_CUSTOMER).status_code == 403

    def test_get_shipment(self, client):
        shipment_id = _book(client).json()["shipment_id"]

        response = client.get(f"/shipments/{shipment_id}", headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json()["shipment"]["status"] == "label_created"

    def test_vendor_shipments(self, client):
        _book(client)

        response = client.get("/shipments/mine", headers=VENDOR)

        assert len(response.json()["shipments"]) == 1
        assert client.get("/shipments/mine", headers=CUSTOMER).status_code == 403

    def test_public_tracking(self, client):
        tracking_number = _book(client).json()["tracking_number"]

        response = client.get(f"/shipments/track/{tracking_number}")

        assert response.status_code == 200
        assert response.json()["tracking"]["status"] == "label_created"

    def test_public_tracking_unknown(self, client):
        assert client.get("/shipments/track/NOPE").status_code == 404


class TestRatesAndPickups:
    def test_rates_for_order(self, client):
        response = client.post("/shipments/rates", json={"order_id": "ord-1", "weight_kg": 2.0}, headers=VENDOR)

        assert response.status_code == 200
        assert len(response.json()["rates"]) == 2

    def test_rates_carrier_failure(self, client, carrier):
        carrier.configure(should_succeed=False)

        response = client.post("/shipments/rates", json={"order_id": "ord-1"}, headers=VENDOR)

        assert response.status_code == 502

    def test_pickup_availability(self, client):
        response = client.get(
            "/shipments/pickup-availability", params={"postal_code": "00000", "country": "ae"}, headers=VENDOR
        )

        assert response.status_code == 200
        assert len(response.json()["dates"]) == 5

    def test_vendor_schedules_pickup(self, client):
        shipment_id = _book(client, headers=VENDOR, leg="vendor_to_admin", **VENDOR_PICKUP).json()["shipment_id"]

        response = client.post(
            f"/shipments/{shipment_id}/pickup",
            json={"pickup_date": "2026-10-21", "ready_time": "09:00", "close_time": "17:00"},
            headers=VENDOR,
        )

        assert response.status_code == 200
        assert response.json()["pickup_date"] == "2026-10-21"

    def test_bad_pickup_date_format(self, client):
        shipment_id = _book(client).json()["shipment_id"]

        response = client.post(
            f"/shipments/{shipment_id}/pickup",
            json={"pickup_date": "21/10/2026", "ready_time": "09:00", "close_time": "17:00"},
            headers=ORDER_MANAGER,
        )

        assert response.status_code == 422


class TestTrackingAndCancellation:
    def test_webhook_updates_tracking(self, client):
        tracking_number = _book(client).json()["tracking_number"]

        response = client.post(
            "/shipments/webhook",
            json={
                "trackingNumber": tracking_number,
                "eventType": "PK",
                "eventDescription": "Picked up",
                "eventTimestamp": "2026-10-19T10:00:00+04:00",
            },
        )

        assert response.status_code == 200
        tracking = client.get(f"/shipments/track/{tracking_number}").json()["tracking"]
        assert tracking["status"] == "picked_up"
        assert tracking["events"][0]["occurred_at"] == "2026-10-19T10:00:00+04:00"

    def test_webhook_unknown_tracking_number(self, client):
        response = client.post("/shipments/webhook", json={"trackingNumber": "NOPE", "eventType": "PU"})
        assert response.status_code == 404

    def test_webhook_signature_enforced(self, client):
        set_carrier(FedExCarrier(client_id="k", client_secret="s", account_number="a", webhook_secret="whsec"))

        response = client.post(
            "/shipments/webhook",
            content=json.dumps({"trackingNumber": "794699999999", "eventType": "DL"}),
            headers={"X-Carrier-Signature": "forged"},
        )

        assert response.status_code == 401

    def test_refresh_tracking(self, client):
        shipment_id = _book(client).json()["shipment_id"]

        response = client.post(f"/shipments/{shipment_id}/refresh-tracking", headers=ORDER_VIEWER)

        assert response.status_code == 200
        assert response.json() == {"status": "in_transit", "new_events": 2}

    def test_cancel(self, client):
        shipment_id = _book(client).json()["shipment_id"]

        response = client.post(f"/shipments/{shipment_id}/cancel", json={"reason": "Duplicate"}, headers=ORDER_MANAGER)

        assert response.status_code == 200
        assert client.get(f"/shipments/{shipment_id}", headers=ORDER_VIEWER).json()["shipment"]["status"] == "cancelled"

    def test_cancel_requires_manage(self, client):
        shipment_id = _book(client).json()["shipment_id"]

        response = client.post(f"/shipments/{shipment_id}/cancel", json={}, headers=ORDER_VIEWER)

        assert response.status_code == 403


class TestCarrierConfiguration:
    def test_configure_fake_carrier(self, client):
        response = client.post("/shipments/carrier/configure", json={"should_succeed": False})

        assert response.status_code == 200
        assert response.json() == {
            "carrier": "FakeCarrier",
            "should_succeed": False,
            "failure_reason": "Carrier unavailable",
        }

    def test_refused_in_production(self, client, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "production")

        response = client.post("/shipments/carrier/configure", json={"should_succeed": False})

        assert response.status_code == 403

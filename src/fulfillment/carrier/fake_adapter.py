"""Fake carrier adapter — deterministic carrier for testing and development.

Generates mock tracking numbers, labels, rates and pickup confirmations.
Configurable success/failure behavior for integration testing.
"""

from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from fulfillment.carrier.port import CarrierPort, PickupRequest, ShipmentRequest

FAKE_SERVICES = (
    ("FEDEX_INTERNATIONAL_PRIORITY", "FedEx International Priority", 45.0, 2),
    ("INTERNATIONAL_ECONOMY", "FedEx International Economy", 30.0, 5),
)


def business_days(start: date, count: int) -> list[str]:
    days, current = [], start
    while len(days) < count:
        current += timedelta(days=1)
        # Friday and Saturday are the UAE weekend
        if current.weekday() not in (4, 5):
            days.append(current.isoformat())
    return days


class FakeCarrier(CarrierPort):
    """Fake carrier that always succeeds by default."""

    name = "fake"

    def __init__(self):
        self.should_succeed = True
        self.failure_reason = "Carrier unavailable"
        self.shipments: dict[str, dict] = {}
        self.calls: list[str] = []
        self.last_request: ShipmentRequest | PickupRequest | None = None

    def configure(self, should_succeed: bool = True, failure_reason: str = "Carrier unavailable"):
        """Configure the fake carrier behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _failure(self) -> dict:
        return {"success": False, "error": self.failure_reason}

    def get_rates(self, request: ShipmentRequest) -> dict:
        self.calls.append("get_rates")
        self.last_request = request
        if not self.should_succeed:
            return self._failure()

        weight = max(request.weight_kg, 0.5)
        rates = [
            {
                "service_type": service_type,
                "service_name": name,
                "total_charge": round(base + weight * 4.0 * request.package_count, 2),
                "currency": "AED",
                "transit_days": transit_days,
            }
            for service_type, name, base, transit_days in FAKE_SERVICES
        ]
        return {"success": True, "data": rates}

    def create_shipment(self, request: ShipmentRequest) -> dict:
        self.calls.append("create_shipment")
        self.last_request = request
        if not self.should_succeed:
            return self._failure()

        tracking_number = f"FAKE-{uuid4().hex[:12].upper()}"
        shipment_id = f"ship-{uuid4().hex[:8]}"
        self.shipments[tracking_number] = {
            "shipment_id": shipment_id,
            "cancelled": False,
            "created_at": datetime.now(UTC),
        }
        return {
            "success": True,
            "data": {
                "tracking_number": tracking_number,
                "shipment_id": shipment_id,
                "label_url": f"https://fake-carrier.example.com/labels/{shipment_id}.pdf",
            },
        }

    def track(self, tracking_number: str) -> dict:
        self.calls.append("track")
        if not self.should_succeed:
            return self._failure()

        booked_at = self.shipments.get(tracking_number, {}).get("created_at") or datetime.now(UTC)
        return {
            "success": True,
            "data": {
                "tracking_number": tracking_number,
                "status": "in_transit",
                "events": [
                    {
                        "code": "PU",
                        "status": "picked_up",
                        "location": "Dubai, AE",
                        "description": "Picked up",
                        "occurred_at": (booked_at + timedelta(hours=1)).isoformat(),
                    },
                    {
                        "code": "IT",
                        "status": "in_transit",
                        "location": "Dubai Hub, AE",
                        "description": "In transit",
                        "occurred_at": (booked_at + timedelta(hours=6)).isoformat(),
                    },
                ],
            },
        }

    def schedule_pickup(self, request: PickupRequest) -> dict:
        self.calls.append("schedule_pickup")
        self.last_request = request
        if not self.should_succeed:
            return self._failure()
        return {
            "success": True,
            "data": {"confirmation_code": f"PU-{uuid4().hex[:8].upper()}", "pickup_date": request.pickup_date},
        }

    def get_pickup_availability(self, postal_code: str, country: str) -> dict:
        self.calls.append("get_pickup_availability")
        if not self.should_succeed:
            return self._failure()
        return {"success": True, "data": {"dates": business_days(date.today(), 5)}}

    def cancel_shipment(self, tracking_number: str) -> dict:
        self.calls.append("cancel_shipment")
        if not self.should_succeed:
            return self._failure()
        if tracking_number in self.shipments:
            self.shipments[tracking_number]["cancelled"] = True
        return {"success": True, "error": None}

    def verify_webhook_signature(self, payload: str | bytes, signature: str) -> bool:
        # FakeCarrier accepts any signature (or empty signature) for testing
        return True

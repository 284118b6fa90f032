"""Carrier port — abstract interface for shipping carrier integrations.

All carrier adapters must implement this interface. The domain code
programs against the port; adapters are swapped via configuration.

Every call returns a result dict with a `success` flag. Successful calls
carry their payload under `data`; failed calls carry a human-readable
`error` instead of raising, so callers decide how to surface it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ShipmentRequest:
    """A parcel to move from one party to another.

    Addresses are dicts of street_lines, city, state, postal_code and
    country_code; contacts are dicts of name, phone, email and company.
    """

    from_address: dict
    from_contact: dict
    to_address: dict
    to_contact: dict
    weight_kg: float
    package_count: int = 1
    ship_date: str | None = None  # YYYY-MM-DD
    service_type: str | None = None
    packaging_type: str | None = None
    pickup_type: str | None = None
    dimensions: dict = field(default_factory=dict)


@dataclass(frozen=True)
class PickupRequest:
    pickup_address: dict
    pickup_contact: dict
    pickup_date: str  # YYYY-MM-DD
    ready_time: str  # HH:MM
    close_time: str  # HH:MM
    package_count: int = 1
    total_weight_kg: float = 1.0


class CarrierPort(ABC):
    """Abstract interface for carrier adapters."""

    name: str = "carrier"

    @abstractmethod
    def get_rates(self, request: ShipmentRequest) -> dict:
        """Quote the available services for a shipment.

        Returns:
            {"success": True, "data": [{service_type, service_name, total_charge,
            currency, transit_days}, ...]}
        """
        ...

    @abstractmethod
    def create_shipment(self, request: ShipmentRequest) -> dict:
        """Book a shipment and issue its label.

        Returns:
            {"success": True, "data": {tracking_number, shipment_id, label_url}}
        """
        ...

    @abstractmethod
    def track(self, tracking_number: str) -> dict:
        """Current tracking status for a shipment.

        Returns:
            {"success": True, "data": {tracking_number, status, events: [...]}}
        """
        ...

    @abstractmethod
    def schedule_pickup(self, request: PickupRequest) -> dict:
        """Ask the carrier to collect parcels.

        Returns:
            {"success": True, "data": {confirmation_code, pickup_date}}
        """
        ...

    @abstractmethod
    def get_pickup_availability(self, postal_code: str, country: str) -> dict:
        """Dates the carrier can collect from an address.

        Returns:
            {"success": True, "data": {"dates": ["YYYY-MM-DD", ...]}}
        """
        ...

    @abstractmethod
    def cancel_shipment(self, tracking_number: str) -> dict:
        """Cancel a booked shipment.

        Returns:
            {"success": bool, "error": str | None}
        """
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: str | bytes, signature: str) -> bool:
        """Verify that a webhook callback is authentic."""
        ...

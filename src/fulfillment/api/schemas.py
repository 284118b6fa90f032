"""Pydantic API schemas for the Fulfillment domain.

These are the external API contracts — separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class CarrierAddress(BaseModel):
    street_lines: list[str]
    city: str
    state: str | None = None
    postal_code: str | None = None
    country_code: str = Field(min_length=2, max_length=2)


class CarrierContact(BaseModel):
    name: str
    phone: str | None = None
    email: str | None = None
    company: str | None = None


class Dimensions(BaseModel):
    length: float = Field(gt=0)
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    units: str = Field(default="CM", pattern="^(CM|IN)$")


class RouteRequest(BaseModel):
    leg: str = Field(default="admin_to_customer", pattern="^(vendor_to_admin|admin_to_customer)$")
    from_address: CarrierAddress | None = None
    from_contact: CarrierContact | None = None
    to_address: CarrierAddress | None = None
    to_contact: CarrierContact | None = None
    weight_kg: float = Field(gt=0, default=1.0)
    package_count: int = Field(ge=1, default=1)
    dimensions: Dimensions | None = None
    service_type: str | None = None
    ship_date: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")


class RateQuoteRequest(RouteRequest):
    order_id: str | None = None


class CreateShipmentRequest(RouteRequest):
    order_id: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_id": "ord-001",
                    "leg": "vendor_to_admin",
                    "from_address": {
                        "street_lines": ["Unit 7, Jebel Ali Free Zone"],
                        "city": "Dubai",
                        "country_code": "AE",
                    },
                    "from_contact": {"name": "Falcon Tactical", "phone": "+971500000000"},
                    "weight_kg": 4.5,
                }
            ]
        }
    }


class SchedulePickupRequest(BaseModel):
    pickup_date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    ready_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    close_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    package_count: int | None = Field(default=None, ge=1)
    pickup_address: CarrierAddress | None = None
    pickup_contact: CarrierContact | None = None


class CancelShipmentRequest(BaseModel):
    reason: str | None = None


class CarrierWebhookRequest(BaseModel):
    """Carrier tracking callback, in the carrier's own field names."""

    model_config = ConfigDict(populate_by_name=True)

    tracking_number: str = Field(alias="trackingNumber")
    event_type: str | None = Field(default=None, alias="eventType")
    event_description: str | None = Field(default=None, alias="eventDescription")
    event_timestamp: str | None = Field(default=None, alias="eventTimestamp")
    location: str | None = None


class ConfigureCarrierRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Carrier unavailable"


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class CreateShipmentResponse(BaseModel):
    shipment_id: str
    tracking_number: str
    label_url: str | None = None


class ShipmentResponse(BaseModel):
    shipment: dict[str, Any]


class ShipmentListResponse(BaseModel):
    shipments: list[dict[str, Any]]


class RateQuoteResponse(BaseModel):
    rates: list[dict[str, Any]]


class PickupResponse(BaseModel):
    confirmation_code: str
    pickup_date: str


class PickupAvailabilityResponse(BaseModel):
    dates: list[str]


class TrackingResponse(BaseModel):
    tracking: dict[str, Any]


class RefreshTrackingResponse(BaseModel):
    status: str
    new_events: int


class CarrierConfigResponse(BaseModel):
    carrier: str
    should_succeed: bool
    failure_reason: str


class StatusResponse(BaseModel):
    status: str

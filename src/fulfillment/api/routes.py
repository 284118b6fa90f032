"""FastAPI routes for the Fulfillment domain."""

import json
import os

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from protean.utils.globals import current_domain
from pydantic import ValidationError as SchemaValidationError

from fulfillment.api.schemas import (
    CancelShipmentRequest,
    CarrierConfigResponse,
    CarrierWebhookRequest,
    ConfigureCarrierRequest,
    CreateShipmentRequest,
    CreateShipmentResponse,
    PickupAvailabilityResponse,
    PickupResponse,
    RateQuoteRequest,
    RateQuoteResponse,
    RefreshTrackingResponse,
    RouteRequest,
    SchedulePickupRequest,
    ShipmentListResponse,
    ShipmentResponse,
    StatusResponse,
    TrackingResponse,
)
from fulfillment.carrier import get_carrier
from fulfillment.carrier.fake_adapter import FakeCarrier
from fulfillment.projections.shipment_tracking import tracking_by_number
from fulfillment.shipment.cancellation import CancelShipment
from fulfillment.shipment.creation import CreateShipment
from fulfillment.shipment.listing import shipments_for_order, shipments_for_vendor
from fulfillment.shipment.pickup import SchedulePickup
from fulfillment.shipment.rates import pickup_availability, quote_rates
from fulfillment.shipment.routing import shippable_order
from fulfillment.shipment.shipment import Shipment
from fulfillment.shipment.tracking import RecordTrackingUpdate, RefreshTracking, parse_timestamp
from shared.access import AccessDenied, Actor, Permission, current_actor, require_permission

# ---------------------------------------------------------------------------
# Shipment Router
# ---------------------------------------------------------------------------
shipment_router = APIRouter(prefix="/shipments", tags=["shipments"])

_VIEW = (Permission.ORDER_VIEW.value, Permission.ORDER_MANAGE.value)


def _dump(model):
    return json.dumps(model.model_dump(exclude_none=True)) if model else None


def _route_fields(body: RouteRequest) -> dict:
    return {
        "from_address": _dump(body.from_address),
        "from_contact": _dump(body.from_contact),
        "to_address": _dump(body.to_address),
        "to_contact": _dump(body.to_contact),
        "weight_kg": body.weight_kg,
        "package_count": body.package_count,
        "dimensions": _dump(body.dimensions),
        "service_type": body.service_type,
        "ship_date": body.ship_date,
    }


def _acting_vendor(actor: Actor) -> str | None:
    """The vendor id to scope a command to, or None for admins."""
    if actor.is_vendor:
        return actor.id
    require_permission(actor, Permission.ORDER_MANAGE.value)
    return None


def _require_order_visible(actor: Actor, order_id: str) -> None:
    if actor.has_any_permission(*_VIEW):
        return
    order = shippable_order(order_id)
    if actor.is_vendor and str(order.vendor_id or "") == actor.id:
        return
    if not actor.is_admin and not actor.is_vendor and str(order.customer_id) == actor.id:
        return
    raise AccessDenied("You cannot view shipments for this order")


@shipment_router.post("/rates", response_model=RateQuoteResponse)
async def get_rates(body: RateQuoteRequest, actor: Actor = Depends(current_actor)) -> RateQuoteResponse:
    """Quote carrier rates for an order or an ad hoc route. Nothing is stored."""
    fields = _route_fields(body)
    result = quote_rates(body.leg, order_id=body.order_id, **fields)
    if not result["success"]:
        raise HTTPException(status_code=502, detail=result["error"])
    return RateQuoteResponse(rates=result["data"])


@shipment_router.get("/pickup-availability", response_model=PickupAvailabilityResponse)
async def get_pickup_availability(
    postal_code: str = Query(...),
    country: str = Query(..., min_length=2, max_length=2),
    actor: Actor = Depends(current_actor),
) -> PickupAvailabilityResponse:
    result = pickup_availability(postal_code, country.upper())
    if not result["success"]:
        raise HTTPException(status_code=502, detail=result["error"])
    return PickupAvailabilityResponse(dates=result["data"]["dates"])


@shipment_router.post("", status_code=201, response_model=CreateShipmentResponse)
async def create_shipment(body: CreateShipmentRequest, actor: Actor = Depends(current_actor)) -> CreateShipmentResponse:
    """Book a shipment with the carrier and issue its label."""
    command = CreateShipment(
        order_id=body.order_id,
        leg=body.leg,
        requested_by_vendor=_acting_vendor(actor),
        **_route_fields(body),
    )
    result = current_domain.process(command, asynchronous=False)
    return CreateShipmentResponse(**result)


@shipment_router.get("/mine", response_model=ShipmentListResponse)
async def list_my_shipments(actor: Actor = Depends(current_actor)) -> ShipmentListResponse:
    """A vendor's own shipments, newest first."""
    if not actor.is_vendor:
        raise AccessDenied("Vendor access required")
    return ShipmentListResponse(shipments=[s.as_dict() for s in shipments_for_vendor(actor.id)])


@shipment_router.get("/order/{order_id}", response_model=ShipmentListResponse)
async def list_order_shipments(order_id: str, actor: Actor = Depends(current_actor)) -> ShipmentListResponse:
    _require_order_visible(actor, order_id)
    return ShipmentListResponse(shipments=[s.as_dict() for s in shipments_for_order(order_id)])


@shipment_router.get("/track/{tracking_number}", response_model=TrackingResponse)
async def track_shipment(tracking_number: str) -> TrackingResponse:
    """Public tracking page data."""
    view = tracking_by_number(tracking_number)
    if view is None:
        raise HTTPException(status_code=404, detail="Tracking number not found")
    return TrackingResponse(tracking=view.as_dict())


@shipment_router.post("/webhook", response_model=StatusResponse)
async def carrier_webhook(request: Request, x_carrier_signature: str = Header(default="")) -> StatusResponse:
    """Process a carrier tracking webhook callback."""
    payload = await request.body()
    if not get_carrier().verify_webhook_signature(payload, x_carrier_signature):
        raise HTTPException(status_code=401, detail="Invalid carrier webhook signature")

    try:
        body = CarrierWebhookRequest.model_validate_json(payload)
    except SchemaValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False)) from exc

    command = RecordTrackingUpdate(
        tracking_number=body.tracking_number,
        code=body.event_type,
        description=body.event_description,
        location=body.location,
        occurred_at=parse_timestamp(body.event_timestamp),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="tracking_updated")


@shipment_router.post("/carrier/configure", response_model=CarrierConfigResponse)
async def configure_carrier(body: ConfigureCarrierRequest) -> CarrierConfigResponse:
    """Configure the FakeCarrier behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Carrier configuration not available in production")

    carrier = get_carrier()
    if not isinstance(carrier, FakeCarrier):
        raise HTTPException(status_code=400, detail="Carrier configuration only available for FakeCarrier")

    carrier.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
    )
    return CarrierConfigResponse(
        carrier=type(carrier).__name__,
        should_succeed=carrier.should_succeed,
        failure_reason=carrier.failure_reason,
    )


@shipment_router.get("/{shipment_id}", response_model=ShipmentResponse)
async def get_shipment(shipment_id: str, actor: Actor = Depends(current_actor)) -> ShipmentResponse:
    shipment = current_domain.repository_for(Shipment).get(shipment_id)
    _require_order_visible(actor, str(shipment.order_id))
    return ShipmentResponse(shipment=shipment.as_dict())


@shipment_router.post("/{shipment_id}/pickup", response_model=PickupResponse)
async def schedule_pickup(
    shipment_id: str, body: SchedulePickupRequest, actor: Actor = Depends(current_actor)
) -> PickupResponse:
    """Ask the carrier to collect a booked shipment."""
    command = SchedulePickup(
        shipment_id=shipment_id,
        pickup_date=body.pickup_date,
        ready_time=body.ready_time,
        close_time=body.close_time,
        package_count=body.package_count,
        pickup_address=_dump(body.pickup_address),
        pickup_contact=_dump(body.pickup_contact),
        requested_by_vendor=_acting_vendor(actor),
    )
    result = current_domain.process(command, asynchronous=False)
    return PickupResponse(**result)


@shipment_router.post("/{shipment_id}/refresh-tracking", response_model=RefreshTrackingResponse)
async def refresh_tracking(shipment_id: str, actor: Actor = Depends(current_actor)) -> RefreshTrackingResponse:
    """Poll the carrier for scans the webhook may have missed."""
    require_permission(actor, *_VIEW)
    result = current_domain.process(RefreshTracking(shipment_id=shipment_id), asynchronous=False)
    return RefreshTrackingResponse(**result)


@shipment_router.post("/{shipment_id}/cancel", response_model=StatusResponse)
async def cancel_shipment(
    shipment_id: str, body: CancelShipmentRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_permission(actor, Permission.ORDER_MANAGE.value)
    current_domain.process(CancelShipment(shipment_id=shipment_id, reason=body.reason), asynchronous=False)
    return StatusResponse(status="cancelled")

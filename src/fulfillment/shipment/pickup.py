"""Carrier pickups for booked shipments."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from fulfillment.carrier import get_carrier
from fulfillment.carrier.port import PickupRequest
from fulfillment.domain import fulfillment
from fulfillment.shipment.shipment import Shipment
from shared.access import AccessDenied

logger = structlog.get_logger(__name__)


@fulfillment.command(part_of="Shipment")
class SchedulePickup:
    shipment_id = Identifier(required=True)
    pickup_date = String(required=True, max_length=10)  # YYYY-MM-DD
    ready_time = String(required=True, max_length=5)  # HH:MM
    close_time = String(required=True, max_length=5)  # HH:MM
    package_count = Integer(min_value=1)
    pickup_address = Text()  # JSON, defaults to the shipment's origin
    pickup_contact = Text()  # JSON
    requested_by_vendor = Identifier()


@fulfillment.command_handler(part_of=Shipment)
class SchedulePickupHandler:
    @handle(SchedulePickup)
    def schedule_pickup(self, command):
        if command.close_time <= command.ready_time:
            raise ValidationError({"close_time": ["Close time must be after ready time"]})

        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        if command.requested_by_vendor and str(shipment.vendor_id or "") != str(command.requested_by_vendor):
            raise AccessDenied("This shipment belongs to another vendor")

        origin = shipment.origin_details
        address = json.loads(command.pickup_address) if command.pickup_address else origin.get("address")
        contact = json.loads(command.pickup_contact) if command.pickup_contact else origin.get("contact")
        if not address:
            raise ValidationError({"pickup_address": ["Pickup address is required"]})

        result = get_carrier().schedule_pickup(
            PickupRequest(
                pickup_address=address,
                pickup_contact=contact or {},
                pickup_date=command.pickup_date,
                ready_time=command.ready_time,
                close_time=command.close_time,
                package_count=command.package_count or shipment.package_count or 1,
                total_weight_kg=shipment.weight_kg or 1.0,
            )
        )
        if not result["success"]:
            logger.warning("Pickup scheduling failed", shipment_id=str(shipment.id), error=result["error"])
            raise ValidationError({"carrier": [result["error"] or "Failed to schedule pickup"]})

        confirmation = result["data"]["confirmation_code"]
        shipment.schedule_pickup(confirmation, command.pickup_date)
        repo.add(shipment)

        logger.info(
            "Pickup scheduled",
            shipment_id=str(shipment.id),
            confirmation_code=confirmation,
            pickup_date=command.pickup_date,
        )
        return {"confirmation_code": confirmation, "pickup_date": command.pickup_date}

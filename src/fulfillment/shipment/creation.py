"""Shipment creation — book with the carrier and record the label.

Vendors may only book the first leg of their own orders, shipping to the
platform warehouse. Admins book either leg.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from fulfillment.carrier import get_carrier
from fulfillment.domain import fulfillment
from fulfillment.shipment.routing import build_request, shippable_order
from fulfillment.shipment.shipment import Shipment, ShipmentLeg
from shared.access import AccessDenied

logger = structlog.get_logger(__name__)


@fulfillment.command(part_of="Shipment")
class CreateShipment:
    order_id = Identifier(required=True)
    leg = String(max_length=20, default=ShipmentLeg.ADMIN_TO_CUSTOMER.value)
    from_address = Text()  # JSON
    from_contact = Text()  # JSON
    to_address = Text()  # JSON
    to_contact = Text()  # JSON
    weight_kg = Float(min_value=0.1, default=1.0)
    package_count = Integer(min_value=1, default=1)
    dimensions = Text()  # JSON {length, width, height, units}
    service_type = String(max_length=100)
    ship_date = String(max_length=10)
    requested_by_vendor = Identifier()


@fulfillment.command_handler(part_of=Shipment)
class CreateShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        order = shippable_order(command.order_id)

        if command.requested_by_vendor:
            if command.leg != ShipmentLeg.VENDOR_TO_ADMIN.value:
                raise AccessDenied("Vendors can only ship to the platform warehouse")
            if str(order.vendor_id or "") != str(command.requested_by_vendor):
                raise AccessDenied("This order belongs to another vendor")

        request = build_request(
            command.leg,
            order=order,
            from_address=command.from_address,
            from_contact=command.from_contact,
            to_address=command.to_address,
            to_contact=command.to_contact,
            weight_kg=command.weight_kg,
            package_count=command.package_count,
            dimensions=command.dimensions,
            service_type=command.service_type,
            ship_date=command.ship_date,
        )

        carrier = get_carrier()
        result = carrier.create_shipment(request)
        if not result["success"]:
            logger.warning("Carrier rejected shipment", order_id=str(command.order_id), error=result["error"])
            raise ValidationError({"carrier": [result["error"] or "Failed to create shipment"]})

        booking = result["data"]
        shipment = Shipment.book(
            order_id=command.order_id,
            carrier=carrier.name,
            tracking_number=booking["tracking_number"],
            label_url=booking.get("label_url"),
            carrier_shipment_id=booking.get("shipment_id"),
            vendor_id=order.vendor_id,
            leg=command.leg,
            service_type=request.service_type,
            weight_kg=request.weight_kg,
            package_count=request.package_count,
            origin={"address": request.from_address, "contact": request.from_contact},
        )
        current_domain.repository_for(Shipment).add(shipment)

        logger.info(
            "Shipment created",
            shipment_id=str(shipment.id),
            order_id=str(command.order_id),
            leg=command.leg,
            tracking_number=shipment.tracking_number,
        )
        return {
            "shipment_id": str(shipment.id),
            "tracking_number": shipment.tracking_number,
            "label_url": shipment.label_url,
        }

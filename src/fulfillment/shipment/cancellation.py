"""Shipment cancellation — command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from fulfillment.carrier import get_carrier
from fulfillment.domain import fulfillment
from fulfillment.shipment.shipment import Shipment, ShipmentStatus

logger = structlog.get_logger(__name__)


@fulfillment.command(part_of="Shipment")
class CancelShipment:
    """Cancel a shipment that the carrier has not collected yet."""

    shipment_id = Identifier(required=True)
    reason = String(max_length=500)


@fulfillment.command_handler(part_of=Shipment)
class CancelShipmentHandler:
    @handle(CancelShipment)
    def cancel_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        if shipment.status != ShipmentStatus.LABEL_CREATED.value:
            raise ValidationError({"status": [f"Cannot cancel a shipment that is {shipment.status}"]})

        result = get_carrier().cancel_shipment(shipment.tracking_number)
        if not result["success"]:
            logger.warning("Carrier refused cancellation", shipment_id=str(shipment.id), error=result["error"])
            raise ValidationError({"carrier": [result["error"] or "Failed to cancel shipment"]})

        shipment.cancel(command.reason)
        repo.add(shipment)
        logger.info("Shipment cancelled", shipment_id=str(shipment.id), reason=command.reason)

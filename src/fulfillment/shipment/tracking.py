"""Shipment tracking — carrier webhook updates and polling.

Webhooks identify the shipment by tracking number. Polling asks the
carrier for the full scan history and records the scans not seen yet.
"""

from datetime import datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from fulfillment.carrier import get_carrier
from fulfillment.domain import fulfillment
from fulfillment.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@fulfillment.command(part_of="Shipment")
class RecordTrackingUpdate:
    """Record a tracking event from the carrier webhook."""

    tracking_number = String(required=True, max_length=100)
    code = String(max_length=10)
    description = String(max_length=500)
    location = String(max_length=200)
    occurred_at = DateTime()


@fulfillment.command(part_of="Shipment")
class RefreshTracking:
    """Poll the carrier for a shipment's scan history."""

    shipment_id = Identifier(required=True)


def shipment_by_tracking_number(tracking_number):
    shipments = (
        current_domain.repository_for(Shipment)._dao.query.filter(tracking_number=tracking_number).all().items
    )
    if not shipments:
        raise ObjectNotFoundError(f"No shipment with tracking number {tracking_number}")
    return shipments[0]


def parse_timestamp(value):
    if not value or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


@fulfillment.command_handler(part_of=Shipment)
class TrackingHandler:
    @handle(RecordTrackingUpdate)
    def record_tracking_update(self, command):
        shipment = shipment_by_tracking_number(command.tracking_number)
        shipment.record_tracking(
            code=command.code,
            description=command.description,
            location=command.location,
            occurred_at=command.occurred_at,
        )
        current_domain.repository_for(Shipment).add(shipment)

        logger.info(
            "Tracking update recorded",
            shipment_id=str(shipment.id),
            tracking_number=command.tracking_number,
            code=command.code,
            status=shipment.status,
        )
        return shipment.status

    @handle(RefreshTracking)
    def refresh_tracking(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)

        result = get_carrier().track(shipment.tracking_number)
        if not result["success"]:
            logger.warning("Tracking lookup failed", shipment_id=str(shipment.id), error=result["error"])
            raise ValidationError({"carrier": [result["error"] or "Tracking lookup failed"]})

        seen = {(e.code, e.occurred_at.isoformat()) for e in shipment.tracking_events if e.occurred_at}
        scans = [
            (scan, parse_timestamp(scan.get("occurred_at"))) for scan in result["data"].get("events", [])
        ]
        recorded = 0
        for scan, occurred_at in sorted((s for s in scans if s[1] is not None), key=lambda s: s[1]):
            if (scan.get("code"), occurred_at.isoformat()) in seen:
                continue
            shipment.record_tracking(
                code=scan.get("code"),
                description=scan.get("description"),
                location=scan.get("location"),
                occurred_at=occurred_at,
            )
            recorded += 1

        if recorded:
            repo.add(shipment)
        logger.info("Tracking refreshed", shipment_id=str(shipment.id), new_events=recorded, status=shipment.status)
        return {"status": shipment.status, "new_events": recorded}

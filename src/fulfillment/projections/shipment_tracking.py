"""Shipment tracking — customer-facing tracking page view."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.shipment.events import ShipmentCancelled, ShipmentLabelCreated, ShipmentTrackingUpdated
from fulfillment.shipment.shipment import Shipment


@fulfillment.projection
class ShipmentTrackingView:
    shipment_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    carrier = String()
    tracking_number = String()
    current_status = String(required=True)
    current_location = String()
    events_json = Text()  # JSON list of tracking events
    label_created_at = DateTime()
    last_update_at = DateTime()

    def as_dict(self):
        return {
            "shipment_id": str(self.shipment_id),
            "order_id": str(self.order_id),
            "carrier": self.carrier,
            "tracking_number": self.tracking_number,
            "status": self.current_status,
            "location": self.current_location,
            "events": json.loads(self.events_json or "[]"),
            "last_update_at": self.last_update_at.isoformat() if self.last_update_at else None,
        }


def tracking_by_number(tracking_number):
    views = (
        current_domain.repository_for(ShipmentTrackingView)
        ._dao.query.filter(tracking_number=tracking_number)
        .all()
        .items
    )
    return views[0] if views else None


def tracking_for_order(order_id):
    views = current_domain.repository_for(ShipmentTrackingView)._dao.query.filter(order_id=str(order_id)).all().items
    return sorted(views, key=lambda v: v.label_created_at)


@fulfillment.projector(projector_for=ShipmentTrackingView, aggregates=[Shipment])
class ShipmentTrackingProjector:
    @on(ShipmentLabelCreated)
    def on_shipment_label_created(self, event):
        current_domain.repository_for(ShipmentTrackingView).add(
            ShipmentTrackingView(
                shipment_id=event.shipment_id,
                order_id=event.order_id,
                carrier=event.carrier,
                tracking_number=event.tracking_number,
                current_status="label_created",
                events_json=json.dumps([]),
                label_created_at=event.created_at,
                last_update_at=event.created_at,
            )
        )

    @on(ShipmentTrackingUpdated)
    def on_shipment_tracking_updated(self, event):
        repo = current_domain.repository_for(ShipmentTrackingView)
        view = repo.get(event.shipment_id)
        view.current_status = event.status
        if event.location:
            view.current_location = event.location
        view.last_update_at = event.occurred_at

        # Append tracking event to the log
        existing = json.loads(view.events_json) if view.events_json else []
        existing.append(
            {
                "code": event.code,
                "status": event.status,
                "location": event.location,
                "description": event.description,
                "occurred_at": event.occurred_at.isoformat() if event.occurred_at else None,
            }
        )
        view.events_json = json.dumps(existing)
        repo.add(view)

    @on(ShipmentCancelled)
    def on_shipment_cancelled(self, event):
        repo = current_domain.repository_for(ShipmentTrackingView)
        view = repo.get(event.shipment_id)
        view.current_status = "cancelled"
        view.last_update_at = event.cancelled_at
        repo.add(view)

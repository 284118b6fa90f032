"""Inbound cross-domain event handler — Ordering reacts to Fulfillment events.

A label on the vendor leg marks the parcel as handed over by the vendor,
and its delivery as received at the warehouse. Labels and deliveries on
the customer leg copy the carrier's tracking onto the order and mark it
shipped, then delivered.
"""

import structlog
from protean import handle
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import CUSTOMER_LEG, Order
from shared.events.fulfillment import ShipmentDelivered, ShipmentLabelCreated

logger = structlog.get_logger(__name__)

ordering.register_external_event(ShipmentLabelCreated, "Fulfillment.ShipmentLabelCreated.v1")
ordering.register_external_event(ShipmentDelivered, "Fulfillment.ShipmentDelivered.v1")


@ordering.event_handler(part_of=Order, stream_category="fulfillment::shipment")
class FulfillmentEventsHandler:
    @handle(ShipmentLabelCreated)
    def on_label_created(self, event: ShipmentLabelCreated) -> None:
        repo = current_domain.repository_for(Order)
        order = repo.get(event.order_id)
        order.record_label(
            event.tracking_number,
            shipment_id=event.carrier_shipment_id,
            label_url=event.label_url,
            leg=event.leg or CUSTOMER_LEG,
        )
        repo.add(order)
        logger.info(
            "Tracking recorded on order",
            order_id=str(order.id),
            tracking_number=event.tracking_number,
            leg=event.leg,
            shipment_status=order.shipment_status,
        )

    @handle(ShipmentDelivered)
    def on_shipment_delivered(self, event: ShipmentDelivered) -> None:
        repo = current_domain.repository_for(Order)
        order = repo.get(event.order_id)
        order.mark_delivered(leg=event.leg or CUSTOMER_LEG)
        repo.add(order)
        logger.info(
            "Carrier delivery recorded on order",
            order_id=str(order.id),
            leg=event.leg,
            shipment_status=order.shipment_status,
        )

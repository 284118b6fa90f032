"""Inbound cross-domain event handler — Fulfillment learns about placed orders."""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from fulfillment.domain import fulfillment
from fulfillment.projections.shippable_order import ShippableOrder
from fulfillment.shipment.shipment import Shipment
from shared.events.ordering import OrderGroupPlaced

logger = structlog.get_logger(__name__)

fulfillment.register_external_event(OrderGroupPlaced, "Ordering.OrderGroupPlaced.v1")


@fulfillment.event_handler(part_of=Shipment, stream_category="ordering::order_group")
class OrderingEventHandler:
    @handle(OrderGroupPlaced)
    def on_order_group_placed(self, event: OrderGroupPlaced) -> None:
        repo = current_domain.repository_for(ShippableOrder)
        for order in json.loads(event.orders):
            try:
                shippable = repo.get(order["order_id"])
            except ObjectNotFoundError:
                shippable = ShippableOrder(order_id=order["order_id"], customer_id=str(event.customer_id))
            shippable.order_number = order.get("order_number")
            shippable.order_group_id = event.order_group_id
            shippable.vendor_id = order.get("vendor_id")
            shippable.vendor_country = order.get("vendor_country")
            shippable.shipping_address = event.shipping_address
            shippable.item_count = sum(item.get("quantity", 0) for item in order.get("items", []))
            shippable.placed_at = event.placed_at
            repo.add(shippable)

        logger.info("Shippable orders recorded", order_group_id=event.order_group_id)

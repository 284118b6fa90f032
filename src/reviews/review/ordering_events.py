"""Inbound cross-domain event handler — Reviews reacts to Ordering events.

Listens for OrderDelivered events from the Ordering domain to populate
the VerifiedPurchases projection, which is used by the SubmitReview handler
to flag reviews as verified purchases.

Cross-domain events are imported from shared.events.ordering and registered
as external events via reviews.register_external_event().
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.projections.verified_purchases import VerifiedPurchases
from reviews.review.review import Review
from shared.events.ordering import OrderDelivered

logger = structlog.get_logger(__name__)

# Register external event so Protean can deserialize it
reviews.register_external_event(OrderDelivered, "Ordering.OrderDelivered.v1")


@reviews.event_handler(part_of=Review, stream_category="ordering::order")
class OrderingEventsHandler:
    """Reacts to Ordering domain events to track verified purchases."""

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        """Record one verified purchase per delivered product."""
        vp_repo = current_domain.repository_for(VerifiedPurchases)
        items = json.loads(event.items) if event.items else []
        recorded = 0
        for item in items:
            vp_id = f"{event.order_id}:{item['product_id']}"
            try:
                vp_repo.get(vp_id)
                continue  # Already recorded by an earlier delivery of this event
            except ObjectNotFoundError:
                pass

            vp_repo.add(
                VerifiedPurchases(
                    vp_id=vp_id,
                    customer_id=str(event.customer_id),
                    product_id=str(item["product_id"]),
                    order_id=str(event.order_id),
                    delivered_at=event.delivered_at,
                )
            )
            recorded += 1
        logger.info("Verified purchases recorded", order_id=str(event.order_id), products=recorded)

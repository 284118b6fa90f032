"""Reviews reacting to delivered orders."""

from protean.utils.globals import current_domain
from reviews.projections.verified_purchases import VerifiedPurchases, purchase_of
from reviews.review.ordering_events import OrderingEventsHandler


def test_one_record_per_delivered_product(order_delivered):
    OrderingEventsHandler().on_order_delivered(
        order_delivered(order_id="ord-multi", customer_id="cust-vp", product_ids=("prod-a", "prod-b"))
    )

    assert purchase_of("cust-vp", "prod-a").order_id == "ord-multi"
    assert purchase_of("cust-vp", "prod-b") is not None


def test_replayed_event_is_recorded_once(order_delivered):
    handler = OrderingEventsHandler()
    event = order_delivered(order_id="ord-replay", customer_id="cust-replay", product_ids=("prod-r",))
    handler.on_order_delivered(event)
    handler.on_order_delivered(event)

    records = (
        current_domain.repository_for(VerifiedPurchases)._dao.query.filter(customer_id="cust-replay").all().items
    )
    assert len(records) == 1


def test_no_purchase():
    assert purchase_of("cust-none", "prod-none") is None

"""Application tests for rating updates driven by review events."""

import json
from datetime import UTC, datetime

from catalogue.product.creation import CreateProduct
from catalogue.product.product import Product
from catalogue.product.rating_events import ReviewRatingEventHandler
from protean.utils.globals import current_domain
from shared.events.reviews import ProductRatingChanged


def _product():
    return current_domain.process(
        CreateProduct(name="Car Vacuum", base_price=120.0, vendor_id="vendor-1"), asynchronous=False
    )


def _changed(product_id, average, count):
    return ProductRatingChanged(
        product_id=product_id,
        average_rating=average,
        review_count=count,
        distribution=json.dumps({"1": 0, "2": 1, "3": 0, "4": 0, "5": 1}),
        changed_at=datetime.now(UTC),
    )


class TestReviewRatingEventHandler:
    def test_rating_change_updates_product(self):
        product_id = _product()
        ReviewRatingEventHandler().on_product_rating_changed(_changed(product_id, 3.5, 2))

        product = current_domain.repository_for(Product).get(product_id)
        assert product.review_count == 2
        assert product.rating == 3.5

    def test_replaying_the_same_event_is_harmless(self):
        product_id = _product()
        handler = ReviewRatingEventHandler()
        handler.on_product_rating_changed(_changed(product_id, 4.0, 1))
        handler.on_product_rating_changed(_changed(product_id, 4.0, 1))

        product = current_domain.repository_for(Product).get(product_id)
        assert product.review_count == 1
        assert product.rating == 4.0

    def test_last_review_removed(self):
        product_id = _product()
        handler = ReviewRatingEventHandler()
        handler.on_product_rating_changed(_changed(product_id, 4.0, 1))
        handler.on_product_rating_changed(_changed(product_id, 0.0, 0))

        product = current_domain.repository_for(Product).get(product_id)
        assert product.review_count == 0
        assert product.rating == 0.0

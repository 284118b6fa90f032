"""Inbound cross-domain event handler — Catalogue reacts to Reviews events.

Copies the average rating and review count published by the Reviews
context onto the Product.
"""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer
from protean.utils.globals import current_domain

from catalogue.domain import catalogue
from catalogue.product.product import Product
from shared.events.reviews import ProductRatingChanged

logger = structlog.get_logger(__name__)

catalogue.register_external_event(ProductRatingChanged, "Reviews.ProductRatingChanged.v1")


@catalogue.command(part_of="Product")
class RecordProductRating:
    product_id: Identifier(required=True)
    rating: Float(default=0.0)
    review_count: Integer(default=0)


@catalogue.command_handler(part_of=Product)
class RecordProductRatingHandler:
    @handle(RecordProductRating)
    def record_rating(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.record_rating(rating=command.rating, review_count=command.review_count)
        repo.add(product)


@catalogue.event_handler(part_of=Product, stream_category="reviews::review")
class ReviewRatingEventHandler:
    @handle(ProductRatingChanged)
    def on_product_rating_changed(self, event: ProductRatingChanged) -> None:
        logger.info(
            "Updating product rating",
            product_id=str(event.product_id),
            rating=event.average_rating,
            review_count=event.review_count,
        )
        current_domain.process(
            RecordProductRating(
                product_id=event.product_id,
                rating=event.average_rating,
                review_count=event.review_count,
            ),
            asynchronous=False,
        )

"""SubmitReview — publish a new product review.

Enforces one-review-per-customer-per-product at handler level (cross-instance
check requires repository query). Checks the VerifiedPurchases projection to
flag verified purchases.
"""

import json

from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import logger, reviews
from reviews.projections.verified_purchases import purchase_of
from reviews.review.rating import announce_rating
from reviews.review.review import Review, ReviewStatus


@reviews.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String(max_length=200)
    content = Text(required=True)
    images = Text()  # JSON array of {url, alt_text}


@reviews.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        repo = current_domain.repository_for(Review)

        # Enforce one review per customer per product (removed reviews don't count)
        existing = repo._dao.query.filter(
            customer_id=str(command.customer_id),
            product_id=str(command.product_id),
            status=ReviewStatus.PUBLISHED.value,
        ).all()
        if existing.items:
            raise ValidationError({"review": ["You have already reviewed this product"]})

        purchase = purchase_of(command.customer_id, command.product_id)

        review = Review.submit(
            product_id=command.product_id,
            customer_id=command.customer_id,
            rating=command.rating,
            title=command.title,
            content=command.content,
            images=json.loads(command.images) if command.images else None,
            verified_purchase=purchase is not None,
            order_id=purchase.order_id if purchase else None,
        )
        announce_rating(review)
        repo.add(review)

        logger.info(
            "Review submitted",
            review_id=str(review.id),
            product_id=str(command.product_id),
            rating=command.rating,
            verified=review.verified_purchase,
        )
        return str(review.id)

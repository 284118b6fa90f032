"""ProductRating — aggregated rating statistics per product."""

import json

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Integer, Text
from protean.utils.globals import current_domain

from reviews.domain import reviews
from reviews.review.events import ProductRatingChanged
from reviews.review.review import Review


@reviews.projection
class ProductRating:
    product_id = Identifier(identifier=True, required=True)
    average_rating = Float(default=0.0)
    total_reviews = Integer(default=0)
    rating_distribution = Text()  # JSON: {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}
    verified_review_count = Integer(default=0)
    updated_at = DateTime()


def _empty_distribution():
    return {str(star): 0 for star in range(1, 6)}


def rating_for(product_id):
    """Rating statistics for a product; zeros when nobody has reviewed it yet."""
    try:
        pr = current_domain.repository_for(ProductRating).get(str(product_id))
    except ObjectNotFoundError:
        return {
            "average_rating": 0.0,
            "total_reviews": 0,
            "distribution": _empty_distribution(),
            "verified_review_count": 0,
        }
    return {
        "average_rating": pr.average_rating,
        "total_reviews": pr.total_reviews,
        "distribution": json.loads(pr.rating_distribution or "{}") or _empty_distribution(),
        "verified_review_count": pr.verified_review_count,
    }


@reviews.projector(projector_for=ProductRating, aggregates=[Review])
class ProductRatingProjector:
    @on(ProductRatingChanged)
    def on_product_rating_changed(self, event):
        repo = current_domain.repository_for(ProductRating)
        try:
            pr = repo.get(event.product_id)
        except ObjectNotFoundError:
            pr = ProductRating(product_id=event.product_id)

        pr.average_rating = event.average_rating
        pr.total_reviews = event.review_count
        pr.rating_distribution = event.distribution
        pr.verified_review_count = event.verified_review_count
        pr.updated_at = event.changed_at
        repo.add(pr)

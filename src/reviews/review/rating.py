"""Rating statistics over a product's published reviews.

Handlers call `announce_rating` after changing a review, before saving it,
so the statistics include the change and ProductRatingChanged travels with
the review.
"""

import json
from datetime import UTC, datetime

from protean.utils.globals import current_domain

from reviews.review.events import ProductRatingChanged
from reviews.review.review import Review, ReviewStatus


def rating_stats(reviews_):
    """Average (one decimal), count and 1–5 distribution of the given reviews."""
    distribution = {str(star): 0 for star in range(1, 6)}
    for review in reviews_:
        distribution[str(review.rating)] += 1

    count = sum(distribution.values())
    total = sum(int(star) * n for star, n in distribution.items())
    return {
        "average_rating": round(total / count, 1) if count else 0.0,
        "review_count": count,
        "distribution": distribution,
        "verified_review_count": sum(1 for r in reviews_ if r.verified_purchase),
    }


def _published_with(review):
    published = (
        current_domain.repository_for(Review)
        ._dao.query.filter(product_id=str(review.product_id), status=ReviewStatus.PUBLISHED.value)
        .all()
        .items
    )
    others = [r for r in published if str(r.id) != str(review.id)]
    return others + [review] if review.is_published else others


def announce_rating(review):
    """Raise ProductRatingChanged on `review` with the product's new statistics."""
    stats = rating_stats(_published_with(review))
    review.raise_(
        ProductRatingChanged(
            product_id=str(review.product_id),
            average_rating=stats["average_rating"],
            review_count=stats["review_count"],
            distribution=json.dumps(stats["distribution"]),
            verified_review_count=stats["verified_review_count"],
            changed_at=datetime.now(UTC),
        )
    )
    return stats

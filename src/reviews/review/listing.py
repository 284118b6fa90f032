"""Review listings for product pages and customer profiles."""

import math

from protean.utils.globals import current_domain

from reviews.projections.product_rating import rating_for
from reviews.review.review import Review, ReviewStatus

SORT_FIELDS = ("created_at", "rating", "helpful_count")


def product_reviews(product_id, page=1, limit=10, sort_by="created_at", sort_order="desc"):
    """One page of a product's published reviews, with the product's rating stats."""
    if sort_by not in SORT_FIELDS:
        sort_by = "created_at"
    published = (
        current_domain.repository_for(Review)
        ._dao.query.filter(product_id=str(product_id), status=ReviewStatus.PUBLISHED.value)
        .all()
        .items
    )
    ordered = sorted(published, key=lambda r: getattr(r, sort_by) or 0, reverse=sort_order.lower() == "desc")

    total = len(ordered)
    start = (page - 1) * limit
    return {
        "reviews": [r.as_dict() for r in ordered[start : start + limit]],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        },
        "stats": rating_for(product_id),
    }


def customer_reviews(customer_id):
    reviews_ = (
        current_domain.repository_for(Review)
        ._dao.query.filter(customer_id=str(customer_id), status=ReviewStatus.PUBLISHED.value)
        .all()
        .items
    )
    return sorted(reviews_, key=lambda r: r.created_at, reverse=True)

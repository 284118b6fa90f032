"""Domain events for the Review aggregate.

All events are versioned, immutable facts representing state changes.
Events are used for:
- Updating projections via projectors
- Cross-domain communication (ProductRatingChanged feeds the Catalogue)
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from reviews.domain import reviews


@reviews.event(part_of="Review")
class ReviewSubmitted:
    """A customer published a new product review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier()
    rating = Integer(required=True)
    title = String()
    content = Text(required=True)
    verified_purchase = String(required=True)  # "True"/"False"
    image_count = Integer(default=0)
    submitted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewEdited:
    """The author changed their review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_rating = Integer(required=True)
    rating = Integer(required=True)
    title = String()
    content = Text()
    edited_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewRemoved:
    """A review was taken down and no longer counts towards the rating."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True)
    removed_by = String(required=True)
    reason = String()
    removed_at = DateTime(required=True)


@reviews.event(part_of="Review")
class HelpfulVoteRecorded:
    __version__ = 1

    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    helpful_count = Integer(required=True)
    voted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ProductRatingChanged:
    """A product's published-review statistics moved."""

    __version__ = 1

    product_id = Identifier(required=True)
    average_rating = Float(required=True)
    review_count = Integer(required=True)
    distribution = Text(required=True)  # JSON: {"1": n, ..., "5": n}
    verified_review_count = Integer(default=0)
    changed_at = DateTime(required=True)

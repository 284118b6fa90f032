"""Cross-domain event contracts for Reviews domain events.

The Catalogue keeps `rating` and `review_count` on each product in step with
the published reviews written for it. Registered as external events via
domain.register_external_event() with matching __type__ strings.

The source-of-truth events are in src/reviews/review/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, Integer, Text


class ProductRatingChanged(BaseEvent):
    """A product's published-review statistics moved.

    Carries the absolute statistics, so consumers can apply it idempotently.
    """

    __version__ = 1

    product_id = Identifier(required=True)
    average_rating = Float(required=True)
    review_count = Integer(required=True)
    distribution = Text(required=True)
    verified_review_count = Integer(default=0)
    changed_at = DateTime(required=True)

"""Reviews & Ratings bounded context — Product Reviews and Rating Statistics.

Handles the review lifecycle (CQRS), helpful votes and per-product rating
aggregation. Integrates with Ordering for verified purchase tracking and
tells the Catalogue when a product's rating changes.
"""

import structlog
from protean.domain import Domain

reviews = Domain(name="reviews")

logger = structlog.get_logger(__name__)

"""RemoveReview — take a published review down.

The author may remove their own review; admins may remove any review.
"""

from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import logger, reviews
from reviews.review.rating import announce_rating
from reviews.review.review import Review
from shared.access import AccessDenied


@reviews.command(part_of="Review")
class RemoveReview:
    review_id = Identifier(required=True)
    requested_by = Identifier(required=True)
    by_admin = Boolean(default=False)
    reason = String(max_length=500)


@reviews.command_handler(part_of=Review)
class RemoveReviewHandler:
    @handle(RemoveReview)
    def remove_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        is_author = str(review.customer_id) == str(command.requested_by)
        if not is_author and not command.by_admin:
            raise AccessDenied("You can only delete your own reviews")

        review.remove(removed_by="customer" if is_author else "admin", reason=command.reason)
        announce_rating(review)
        repo.add(review)

        logger.info("Review removed", review_id=str(review.id), removed_by=review.removed_by)

"""MarkReviewHelpful — count a helpful vote on a review.

Cannot vote on own review. Cannot vote twice.
"""

from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.review import Review


@reviews.command(part_of="Review")
class MarkReviewHelpful:
    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)


@reviews.command_handler(part_of=Review)
class MarkReviewHelpfulHandler:
    @handle(MarkReviewHelpful)
    def mark_review_helpful(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        review.mark_helpful(command.voter_id)

        repo.add(review)
        return review.helpful_count

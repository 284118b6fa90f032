"""EditReview — the author changes their published review."""

import json

from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.rating import announce_rating
from reviews.review.review import Review
from shared.access import AccessDenied


@reviews.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)  # Must match original author
    rating = Integer()
    title = String(max_length=200)
    content = Text()
    images = Text()  # JSON array of {url, alt_text}; replaces all images


@reviews.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if str(review.customer_id) != str(command.customer_id):
            raise AccessDenied("You can only edit your own reviews")

        previous_rating = review.edit(
            rating=command.rating,
            title=command.title,
            content=command.content,
            images=json.loads(command.images) if command.images is not None else None,
        )
        if review.rating != previous_rating:
            announce_rating(review)
        repo.add(review)

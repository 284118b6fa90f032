"""Review aggregate (CQRS) — the core of the Reviews & Ratings domain.

A review is published as soon as it is submitted. The author may edit it
while it is published; the author or an admin may remove it.

CQRS (not event sourced) — reviews are write-once-mostly with simple state
transitions and no temporal query needs.

State Machine:
    PUBLISHED → REMOVED
    REMOVED → (terminal)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String, Text

from reviews.domain import reviews
from reviews.review.events import HelpfulVoteRecorded, ReviewEdited, ReviewRemoved, ReviewSubmitted

MIN_CONTENT_LENGTH = 10
MAX_IMAGES = 5


class ReviewStatus(Enum):
    PUBLISHED = "published"
    REMOVED = "removed"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@reviews.entity(part_of="Review")
class ReviewImage:
    """A photo attached to a review."""

    url = String(required=True, max_length=500)
    alt_text = String(max_length=255)
    display_order = Integer(default=0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@reviews.aggregate
class Review:
    """A customer's review of a product."""

    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier()

    # Content
    rating = Integer(required=True)
    title = String(max_length=200)
    content = Text(required=True)
    images = HasMany(ReviewImage)

    verified_purchase = Boolean(default=False)
    status = String(choices=ReviewStatus, default=ReviewStatus.PUBLISHED.value)

    # Helpful votes
    helpful_count = Integer(default=0)
    helpful_voters = Text(default="[]")  # JSON list of voter ids

    # Editing and removal
    is_edited = Boolean(default=False)
    edited_at = DateTime()
    removed_by = String(max_length=50)
    removal_reason = String(max_length=500)

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def rating_must_be_in_range(self):
        if self.rating is not None and not 1 <= self.rating <= 5:
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})

    @invariant.post
    def content_minimum_length(self):
        if self.content is not None and len(self.content.strip()) < MIN_CONTENT_LENGTH:
            raise ValidationError({"content": ["Review content must be at least 10 characters"]})

    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.images) > MAX_IMAGES:
            raise ValidationError({"images": ["Cannot attach more than 5 images to a review"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        product_id,
        customer_id,
        rating,
        content,
        title=None,
        images=None,
        verified_purchase=False,
        order_id=None,
    ):
        now = datetime.now(UTC)
        review = cls(
            product_id=product_id,
            customer_id=customer_id,
            order_id=order_id,
            rating=rating,
            title=title or None,
            content=content.strip() if content else content,
            verified_purchase=verified_purchase,
            status=ReviewStatus.PUBLISHED.value,
            created_at=now,
            updated_at=now,
        )
        for order, image in enumerate(images or []):
            review.add_images(
                ReviewImage(url=image["url"], alt_text=image.get("alt_text"), display_order=order)
            )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                customer_id=str(customer_id),
                order_id=str(order_id) if order_id else None,
                rating=rating,
                title=review.title,
                content=review.content,
                verified_purchase=str(verified_purchase),
                image_count=len(images or []),
                submitted_at=now,
            )
        )
        return review

    @property
    def is_published(self):
        return self.status == ReviewStatus.PUBLISHED.value

    @property
    def voters(self):
        return json.loads(self.helpful_voters or "[]")

    def _assert_published(self, action):
        if not self.is_published:
            raise ValidationError({"status": [f"Cannot {action} a removed review"]})

    # -------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------
    def edit(self, rating=None, title=None, content=None, images=None):
        """Apply the fields that were given; None leaves a field unchanged."""
        self._assert_published("edit")

        previous_rating = self.rating
        now = datetime.now(UTC)
        if rating is not None:
            self.rating = rating
        if title is not None:
            self.title = title
        if content is not None:
            self.content = content.strip()
        if images is not None:
            for image in list(self.images):
                self.remove_images(image)
            for order, image in enumerate(images):
                self.add_images(ReviewImage(url=image["url"], alt_text=image.get("alt_text"), display_order=order))

        self.is_edited = True
        self.edited_at = now
        self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id),
                previous_rating=previous_rating,
                rating=self.rating,
                title=self.title,
                content=self.content,
                edited_at=now,
            )
        )
        return previous_rating

    # -------------------------------------------------------------------
    # Removal
    # -------------------------------------------------------------------
    def remove(self, removed_by, reason=None):
        self._assert_published("remove")

        now = datetime.now(UTC)
        self.status = ReviewStatus.REMOVED.value
        self.removed_by = removed_by
        self.removal_reason = reason
        self.updated_at = now

        self.raise_(
            ReviewRemoved(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id),
                rating=self.rating,
                removed_by=removed_by,
                reason=reason,
                removed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Helpful votes
    # -------------------------------------------------------------------
    def mark_helpful(self, voter_id):
        """Count a helpful vote. Authors cannot vote for their own review, and nobody votes twice."""
        self._assert_published("vote on")
        if str(voter_id) == str(self.customer_id):
            raise ValidationError({"vote": ["You cannot mark your own review as helpful"]})

        voters = self.voters
        if str(voter_id) in voters:
            raise ValidationError({"vote": ["You have already marked this review as helpful"]})

        now = datetime.now(UTC)
        voters.append(str(voter_id))
        self.helpful_voters = json.dumps(voters)
        self.helpful_count = len(voters)
        self.updated_at = now

        self.raise_(
            HelpfulVoteRecorded(
                review_id=str(self.id),
                voter_id=str(voter_id),
                helpful_count=self.helpful_count,
                voted_at=now,
            )
        )

    def as_dict(self):
        return {
            "id": str(self.id),
            "product_id": str(self.product_id),
            "customer_id": str(self.customer_id),
            "rating": self.rating,
            "title": self.title,
            "content": self.content,
            "images": [
                {"url": i.url, "alt_text": i.alt_text}
                for i in sorted(self.images, key=lambda i: i.display_order or 0)
            ],
            "verified_purchase": bool(self.verified_purchase),
            "status": self.status,
            "helpful_count": self.helpful_count or 0,
            "is_edited": bool(self.is_edited),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "edited_at": self.edited_at.isoformat() if self.edited_at else None,
        }

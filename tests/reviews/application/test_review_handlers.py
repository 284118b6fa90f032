"""Application tests for the review command handlers."""

import json

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from reviews.projections.product_rating import rating_for
from reviews.review.editing import EditReview
from reviews.review.listing import customer_reviews, product_reviews
from reviews.review.ordering_events import OrderingEventsHandler
from reviews.review.removal import RemoveReview
from reviews.review.review import Review, ReviewStatus
from reviews.review.voting import MarkReviewHelpful
from shared.access import AccessDenied


def _review(review_id):
    return current_domain.repository_for(Review).get(review_id)


class TestSubmitReview:
    def test_persists_published_review(self, submit):
        review = _review(submit(product_id="prod-submit"))
        assert review.status == ReviewStatus.PUBLISHED.value
        assert review.rating == 4

    def test_one_review_per_product(self, submit):
        submit(product_id="prod-dup")
        with pytest.raises(ValidationError) as exc:
            submit(product_id="prod-dup")
        assert "You have already reviewed this product" in exc.value.messages["review"]

    def test_removed_review_does_not_block_a_new_one(self, submit):
        review_id = submit(product_id="prod-again")
        current_domain.process(RemoveReview(review_id=review_id, requested_by="cust-1"), asynchronous=False)

        assert submit(product_id="prod-again") != review_id

    def test_verified_after_delivery(self, submit, order_delivered):
        OrderingEventsHandler().on_order_delivered(
            order_delivered(order_id="ord-v", customer_id="cust-v", product_ids=("prod-verified",))
        )
        review = _review(submit(product_id="prod-verified", customer_id="cust-v"))

        assert review.verified_purchase
        assert str(review.order_id) == "ord-v"

    def test_unverified_without_delivery(self, submit):
        assert not _review(submit(product_id="prod-unverified")).verified_purchase

    def test_images_are_attached(self, submit):
        images = json.dumps([{"url": "https://cdn.example.com/a.jpg", "alt_text": "Front"}])
        review = _review(submit(product_id="prod-images", images=images))
        assert review.images[0].alt_text == "Front"


class TestProductRating:
    def test_rating_follows_submissions(self, submit):
        submit(product_id="prod-rating", customer_id="cust-1", rating=5)
        submit(product_id="prod-rating", customer_id="cust-2", rating=2)

        stats = rating_for("prod-rating")
        assert stats["average_rating"] == 3.5
        assert stats["total_reviews"] == 2
        assert stats["distribution"]["5"] == 1

    def test_rating_follows_edits(self, submit):
        review_id = submit(product_id="prod-edit-rating", rating=2)
        current_domain.process(EditReview(review_id=review_id, customer_id="cust-1", rating=5), asynchronous=False)

        assert rating_for("prod-edit-rating")["average_rating"] == 5.0

    def test_rating_follows_removal(self, submit):
        submit(product_id="prod-remove-rating", customer_id="cust-1", rating=4)
        review_id = submit(product_id="prod-remove-rating", customer_id="cust-2", rating=1)
        current_domain.process(RemoveReview(review_id=review_id, requested_by="cust-2"), asynchronous=False)

        stats = rating_for("prod-remove-rating")
        assert stats["average_rating"] == 4.0
        assert stats["total_reviews"] == 1

    def test_unreviewed_product(self):
        stats = rating_for("prod-nobody")
        assert stats["total_reviews"] == 0
        assert stats["distribution"] == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}


class TestEditReview:
    def test_author_edits(self, submit):
        review_id = submit(product_id="prod-edit")
        current_domain.process(
            EditReview(review_id=review_id, customer_id="cust-1", title="Updated after a month"), asynchronous=False
        )
        review = _review(review_id)
        assert review.title == "Updated after a month"
        assert review.is_edited

    def test_others_cannot_edit(self, submit):
        review_id = submit(product_id="prod-edit-other")
        with pytest.raises(AccessDenied):
            current_domain.process(EditReview(review_id=review_id, customer_id="cust-2", rating=1), asynchronous=False)


class TestRemoveReview:
    def test_admin_removes_any_review(self, submit):
        review_id = submit(product_id="prod-admin-remove")
        current_domain.process(
            RemoveReview(review_id=review_id, requested_by="admin-1", by_admin=True, reason="Off topic"),
            asynchronous=False,
        )
        review = _review(review_id)
        assert review.status == ReviewStatus.REMOVED.value
        assert review.removed_by == "admin"

    def test_other_customers_cannot_remove(self, submit):
        review_id = submit(product_id="prod-remove-other")
        with pytest.raises(AccessDenied):
            current_domain.process(RemoveReview(review_id=review_id, requested_by="cust-2"), asynchronous=False)


class TestMarkHelpful:
    def test_returns_new_count(self, submit):
        review_id = submit(product_id="prod-helpful")
        count = current_domain.process(MarkReviewHelpful(review_id=review_id, voter_id="cust-2"), asynchronous=False)
        assert count == 1


class TestListings:
    def test_product_reviews_sorted_and_paginated(self, submit):
        for n, rating in enumerate([3, 5, 1]):
            submit(product_id="prod-list", customer_id=f"cust-list-{n}", rating=rating)

        page = product_reviews("prod-list", page=1, limit=2, sort_by="rating", sort_order="desc")

        assert [r["rating"] for r in page["reviews"]] == [5, 3]
        assert page["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}
        assert page["stats"]["total_reviews"] == 3

    def test_removed_reviews_are_hidden(self, submit):
        review_id = submit(product_id="prod-hidden")
        current_domain.process(RemoveReview(review_id=review_id, requested_by="cust-1"), asynchronous=False)

        assert product_reviews("prod-hidden")["reviews"] == []

    def test_customer_reviews(self, submit):
        submit(product_id="prod-mine-1", customer_id="cust-mine")
        submit(product_id="prod-mine-2", customer_id="cust-mine")
        assert len(customer_reviews("cust-mine")) == 2

"""Domain tests for the Review aggregate."""

import pytest
from protean.exceptions import ValidationError
from reviews.review.events import HelpfulVoteRecorded, ReviewEdited, ReviewRemoved, ReviewSubmitted
from reviews.review.review import Review, ReviewStatus

CONTENT = "Solid build, fits my rifle perfectly."


def _review(**overrides):
    fields = {"product_id": "prod-1", "customer_id": "cust-1", "rating": 4, "content": CONTENT}
    fields.update(overrides)
    return Review.submit(**fields)


class TestSubmission:
    def test_review_is_published_immediately(self):
        review = _review()
        assert review.status == ReviewStatus.PUBLISHED.value
        assert review.helpful_count == 0
        assert not review.verified_purchase

    def test_raises_review_submitted(self):
        review = _review(verified_purchase=True, order_id="ord-1")
        event = review._events[0]
        assert isinstance(event, ReviewSubmitted)
        assert event.verified_purchase == "True"
        assert event.order_id == "ord-1"

    def test_content_is_trimmed(self):
        assert _review(content="   Works as described.  ").content == "Works as described."

    def test_images_keep_their_order(self):
        review = _review(images=[{"url": "https://cdn.example.com/a.jpg"}, {"url": "https://cdn.example.com/b.jpg"}])
        assert [i["url"] for i in review.as_dict()["images"]] == [
            "https://cdn.example.com/a.jpg",
            "https://cdn.example.com/b.jpg",
        ]


class TestInvariants:
    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, rating):
        with pytest.raises(ValidationError) as exc:
            _review(rating=rating)
        assert "Rating must be between 1 and 5" in exc.value.messages["rating"]

    def test_short_content(self):
        with pytest.raises(ValidationError) as exc:
            _review(content="Too short")
        assert "content" in exc.value.messages

    def test_too_many_images(self):
        with pytest.raises(ValidationError):
            _review(images=[{"url": f"https://cdn.example.com/{n}.jpg"} for n in range(6)])


class TestEditing:
    def test_edit_changes_only_given_fields(self):
        review = _review(title="Good")
        previous = review.edit(rating=2)

        assert previous == 4
        assert review.rating == 2
        assert review.title == "Good"
        assert review.is_edited
        assert review.edited_at is not None

    def test_raises_review_edited(self):
        review = _review()
        review._events.clear()
        review.edit(content="Changed my mind after a month of use.")
        assert isinstance(review._events[0], ReviewEdited)
        assert review._events[0].previous_rating == review._events[0].rating == 4

    def test_edit_replaces_images(self):
        review = _review(images=[{"url": "https://cdn.example.com/a.jpg"}])
        review.edit(images=[{"url": "https://cdn.example.com/b.jpg"}])
        assert [i.url for i in review.images] == ["https://cdn.example.com/b.jpg"]

    def test_removed_review_cannot_be_edited(self):
        review = _review()
        review.remove(removed_by="customer")
        with pytest.raises(ValidationError):
            review.edit(rating=5)


class TestRemoval:
    def test_remove(self):
        review = _review()
        review._events.clear()
        review.remove(removed_by="admin", reason="Spam")

        assert review.status == ReviewStatus.REMOVED.value
        assert review.removal_reason == "Spam"
        assert isinstance(review._events[0], ReviewRemoved)

    def test_cannot_remove_twice(self):
        review = _review()
        review.remove(removed_by="customer")
        with pytest.raises(ValidationError):
            review.remove(removed_by="customer")


class TestHelpfulVotes:
    def test_vote_counts(self):
        review = _review()
        review._events.clear()
        review.mark_helpful("cust-2")
        review.mark_helpful("cust-3")

        assert review.helpful_count == 2
        assert isinstance(review._events[0], HelpfulVoteRecorded)

    def test_author_cannot_vote(self):
        review = _review()
        with pytest.raises(ValidationError) as exc:
            review.mark_helpful("cust-1")
        assert "You cannot mark your own review as helpful" in exc.value.messages["vote"]

    def test_no_double_votes(self):
        review = _review()
        review.mark_helpful("cust-2")
        with pytest.raises(ValidationError) as exc:
            review.mark_helpful("cust-2")
        assert "You have already marked this review as helpful" in exc.value.messages["vote"]

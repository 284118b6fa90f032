"""Rating statistics over published reviews."""

from reviews.review.rating import rating_stats
from reviews.review.review import Review

CONTENT = "Solid build, fits my rifle perfectly."


def _reviews(*ratings, verified=()):
    return [
        Review.submit(
            product_id="prod-1",
            customer_id=f"cust-{n}",
            rating=rating,
            content=CONTENT,
            verified_purchase=n in verified,
        )
        for n, rating in enumerate(ratings)
    ]


def test_average_to_one_decimal():
    stats = rating_stats(_reviews(5, 4, 4))
    assert stats["average_rating"] == 4.3
    assert stats["review_count"] == 3


def test_distribution_covers_every_star():
    stats = rating_stats(_reviews(5, 5, 1))
    assert stats["distribution"] == {"1": 1, "2": 0, "3": 0, "4": 0, "5": 2}


def test_verified_reviews_are_counted():
    assert rating_stats(_reviews(3, 4, verified=(1,)))["verified_review_count"] == 1


def test_no_reviews():
    stats = rating_stats([])
    assert stats["average_rating"] == 0.0
    assert stats["review_count"] == 0

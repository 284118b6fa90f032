"""FastAPI routes for the Reviews & Ratings bounded context.

Each route translates between Pydantic schemas (external contract) and
Protean commands (internal domain concepts).
"""

import json

from fastapi import APIRouter, Body, Depends, Query
from protean.utils.globals import current_domain

from reviews.api.schemas import (
    EditReviewRequest,
    HelpfulResponse,
    ProductReviewsResponse,
    RemoveReviewRequest,
    ReviewIdResponse,
    ReviewListResponse,
    ReviewResponse,
    StatusResponse,
    SubmitReviewRequest,
)
from reviews.review.editing import EditReview
from reviews.review.listing import customer_reviews, product_reviews
from reviews.review.removal import RemoveReview
from reviews.review.review import Review
from reviews.review.submission import SubmitReview
from reviews.review.voting import MarkReviewHelpful
from shared.access import Actor, current_actor

review_router = APIRouter(prefix="/reviews", tags=["reviews"])


def _images(images):
    return json.dumps([img.model_dump() for img in images]) if images is not None else None


@review_router.get("/products/{product_id}", response_model=ProductReviewsResponse)
async def list_product_reviews(
    product_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("created_at", pattern="^(created_at|rating|helpful_count)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc|ASC|DESC)$"),
) -> ProductReviewsResponse:
    """Published reviews for a product, with its rating statistics."""
    return ProductReviewsResponse(**product_reviews(product_id, page, limit, sort_by, sort_order))


@review_router.post("/products/{product_id}", status_code=201, response_model=ReviewIdResponse)
async def submit_review(
    product_id: str, body: SubmitReviewRequest, actor: Actor = Depends(current_actor)
) -> ReviewIdResponse:
    """Submit a new product review."""
    command = SubmitReview(
        product_id=product_id,
        customer_id=actor.id,
        rating=body.rating,
        title=body.title,
        content=body.content,
        images=_images(body.images),
    )
    review_id = current_domain.process(command, asynchronous=False)
    return ReviewIdResponse(review_id=review_id)


@review_router.get("/mine", response_model=ReviewListResponse)
async def list_my_reviews(actor: Actor = Depends(current_actor)) -> ReviewListResponse:
    return ReviewListResponse(reviews=[r.as_dict() for r in customer_reviews(actor.id)])


@review_router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(review_id: str) -> ReviewResponse:
    review = current_domain.repository_for(Review).get(review_id)
    return ReviewResponse(review=review.as_dict())


@review_router.put("/{review_id}", response_model=StatusResponse)
async def edit_review(review_id: str, body: EditReviewRequest, actor: Actor = Depends(current_actor)) -> StatusResponse:
    """Edit an existing review."""
    command = EditReview(
        review_id=review_id,
        customer_id=actor.id,
        rating=body.rating,
        title=body.title,
        content=body.content,
        images=_images(body.images),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="updated")


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def remove_review(
    review_id: str,
    body: RemoveReviewRequest | None = Body(default=None),
    actor: Actor = Depends(current_actor),
) -> StatusResponse:
    """Remove a review (its author, or any admin)."""
    command = RemoveReview(
        review_id=review_id,
        requested_by=actor.id,
        by_admin=actor.is_admin,
        reason=body.reason if body else None,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="removed")


@review_router.post("/{review_id}/helpful", response_model=HelpfulResponse)
async def mark_helpful(review_id: str, actor: Actor = Depends(current_actor)) -> HelpfulResponse:
    helpful_count = current_domain.process(
        MarkReviewHelpful(review_id=review_id, voter_id=actor.id), asynchronous=False
    )
    return HelpfulResponse(helpful_count=helpful_count)

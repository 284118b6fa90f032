"""Pydantic request/response schemas for the Reviews API.

These are separate from Protean commands (anti-corruption pattern).
The API layer is the external contract; commands are internal domain concepts.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class ReviewImageSchema(BaseModel):
    url: str
    alt_text: str | None = None


class SubmitReviewRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    title: str | None = Field(default=None, max_length=200)
    content: str = Field(min_length=10)
    images: list[ReviewImageSchema] | None = Field(default=None, max_length=5)


class EditReviewRequest(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    title: str | None = Field(default=None, max_length=200)
    content: str | None = Field(default=None, min_length=10)
    images: list[ReviewImageSchema] | None = Field(default=None, max_length=5)


class RemoveReviewRequest(BaseModel):
    reason: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReviewIdResponse(BaseModel):
    review_id: str


class ReviewResponse(BaseModel):
    review: dict[str, Any]


class ProductReviewsResponse(BaseModel):
    reviews: list[dict[str, Any]]
    pagination: dict[str, int]
    stats: dict[str, Any]


class ReviewListResponse(BaseModel):
    reviews: list[dict[str, Any]]


class HelpfulResponse(BaseModel):
    helpful_count: int


class StatusResponse(BaseModel):
    status: str

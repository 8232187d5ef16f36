# =============================================================================
# core/models/rating.py - Rating Schemas
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class Rating(BaseModel):
    """One user's rating of one business."""

    id: UUID
    business_id: UUID
    user_id: UUID
    rating: int = Field(..., ge=1, le=5)
    review_text: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RatingBrief(BaseModel):
    """Average and count, as attached to search results."""

    average: float = 0.0
    count: int = 0


class RatingSummary(RatingBrief):
    """
    Full rating summary for a business.

    `histogram` always has keys 1..5 so clients can render bars without
    checking for missing stars.
    """

    histogram: dict[int, int] = Field(default_factory=lambda: {star: 0 for star in range(1, 6)})


class RatingInput(BaseModel):
    """Body for PUT /me/ratings/{business_id}. Range is checked by the service."""

    rating: int
    review_text: str | None = Field(default=None, max_length=2000)

# =============================================================================
# core/models/search.py - Search & Detail Payloads
# =============================================================================
# Input filters for the discovery pipeline and the enriched shapes it
# produces. Visibility is two separate fields:
# - include_all_statuses: admin privilege flag, lifts the active-only rule
# - status: optional explicit filter, narrows whatever is visible
# =============================================================================

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from core.models.business import Business, BusinessHoursEntry, BusinessStatus, VerificationStatus
from core.models.media import MediaWithUrl
from core.models.rating import Rating, RatingBrief, RatingSummary

T = TypeVar("T")


class SearchFilters(BaseModel):
    """
    Discovery query.

    Coordinates, radius and paging are validated and clamped by the
    pipeline, not here, so out-of-range values reach the service and get
    the same treatment from every entry point.
    """

    query: str | None = Field(default=None, description="Substring matched against name and description")
    latitude: float | None = None
    longitude: float | None = None
    radius_km: float | None = None
    city: str | None = None
    category: str | None = None

    # Visibility
    include_all_statuses: bool = Field(
        default=False,
        description="Admin only: see every status instead of active + own"
    )
    status: BusinessStatus | None = None
    verification_status: VerificationStatus | None = None

    page: int | None = None
    limit: int | None = None

    @property
    def has_center(self) -> bool:
        return self.latitude is not None or self.longitude is not None


class Pagination(BaseModel):
    """Pagination block. `total` is None when it could not be computed."""

    page: int
    limit: int
    total: int | None = None
    total_pages: int | None = None


class EnrichedBusiness(Business):
    """A search hit plus derived per-result data."""

    distance_km: float | None = None
    rating: RatingBrief = Field(default_factory=RatingBrief)
    logo_url: str | None = None
    # None for anonymous viewers, never another user's state
    is_favorited: bool | None = None


class SearchPage(BaseModel):
    results: list[EnrichedBusiness]
    pagination: Pagination


class Page(BaseModel, Generic[T]):
    """Generic paginated list used by the listing endpoints."""

    items: list[T]
    pagination: Pagination


class BusinessDetail(Business):
    """Everything the business page needs in one payload."""

    media: list[MediaWithUrl] = Field(default_factory=list)
    logo_url: str | None = None
    photos: list[MediaWithUrl] = Field(default_factory=list)
    hours: list[BusinessHoursEntry] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    rating_summary: RatingSummary = Field(default_factory=RatingSummary)
    favorite_count: int = 0

    # Viewer-specific
    is_favorited: bool | None = None
    viewer_rating: Rating | None = None

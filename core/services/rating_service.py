# =============================================================================
# core/services/rating_service.py - Rating Aggregator
# =============================================================================
# One rating per (user, business), written with upsert semantics.
# Summaries never return null/NaN: no ratings means average 0 and count 0.
# =============================================================================

import logging
from uuid import UUID

from app.config import Settings
from app.exceptions import InvalidRatingError
from core.models.business import Viewer
from core.models.rating import Rating, RatingBrief, RatingSummary
from core.models.search import Page, Pagination
from core.services.business_service import get_visible_business
from lib.store import MarketplaceStore
from lib.utils import clamp_limit, clamp_page, total_pages

logger = logging.getLogger(__name__)


def validate_rating(rating: object) -> int:
    """Whole stars only. bool is rejected even though it is an int."""
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidRatingError(rating)
    return rating


class RatingService:
    """Service for ratings and their aggregates."""

    def __init__(self, store: MarketplaceStore, settings: Settings):
        self.store = store
        self.settings = settings

    def upsert(
        self,
        business_id: UUID,
        viewer: Viewer,
        rating: int,
        review_text: str | None = None,
    ) -> Rating:
        """
        Insert or replace the viewer's rating of a business.

        Raises:
            InvalidRatingError: If rating is not an integer in 1..5
            BusinessNotFoundError: If the business doesn't exist or isn't visible
        """
        rating = validate_rating(rating)
        get_visible_business(self.store, business_id, viewer)

        saved = self.store.upsert_rating(business_id, viewer.id, rating, review_text)
        logger.info(f"User {viewer.id} rated business {business_id}: {rating}")
        return saved

    def get_viewer_rating(self, business_id: UUID, viewer: Viewer) -> Rating | None:
        return self.store.get_rating(business_id, viewer.id)

    def delete(self, business_id: UUID, viewer: Viewer) -> bool:
        """Remove the viewer's rating. Returns whether a row was removed."""
        removed = self.store.delete_rating(business_id, viewer.id)
        if removed:
            logger.info(f"User {viewer.id} removed rating of business {business_id}")
        return removed

    def summary(self, business_id: UUID) -> RatingSummary:
        return self.store.rating_summary(business_id)

    def get_summary(self, business_id: UUID, viewer: Viewer | None) -> RatingSummary:
        """Summary of a business the viewer can see."""
        get_visible_business(self.store, business_id, viewer)
        return self.summary(business_id)

    def batch_summary(self, business_ids: list[UUID]) -> dict[UUID, RatingBrief]:
        """
        Average and count for every requested id that has ratings.

        Ids without ratings are absent from the map; callers default on miss.
        One round trip regardless of how many ids are passed.
        """
        unique_ids = list(dict.fromkeys(business_ids))
        if not unique_ids:
            return {}
        return self.store.rating_summaries(unique_ids)

    def list_for_business(
        self,
        business_id: UUID,
        viewer: Viewer | None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[Rating]:
        """Ratings of a business, newest first."""
        get_visible_business(self.store, business_id, viewer)

        page = clamp_page(page)
        limit = clamp_limit(limit, self.settings.DEFAULT_PAGE_SIZE, self.settings.MAX_PAGE_SIZE)
        ratings, total = self.store.list_ratings(business_id, limit, (page - 1) * limit)

        return Page[Rating](
            items=ratings,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
        )

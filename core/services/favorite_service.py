# =============================================================================
# core/services/favorite_service.py - Favorite Overlay
# =============================================================================
# Per-viewer favorite membership. Adding and removing are both idempotent.
# =============================================================================

import logging
from uuid import UUID

from app.config import Settings
from app.exceptions import DuplicateRowError
from core.models.business import Business, Viewer
from core.models.favorite import Favorite
from core.models.search import Page, Pagination
from core.services.business_service import get_visible_business
from lib.store import MarketplaceStore
from lib.utils import clamp_limit, clamp_page, total_pages

logger = logging.getLogger(__name__)


class FavoriteService:
    """Service for favorites."""

    def __init__(self, store: MarketplaceStore, settings: Settings):
        self.store = store
        self.settings = settings

    def add(self, viewer: Viewer, business_id: UUID) -> Favorite:
        """
        Favorite a business.

        A second add returns the existing row instead of failing.
        """
        get_visible_business(self.store, business_id, viewer)

        try:
            favorite = self.store.insert_favorite(viewer.id, business_id)
        except DuplicateRowError:
            existing = self.store.get_favorite(viewer.id, business_id)
            if existing is None:
                # Removed between our insert and lookup; the duplicate is stale
                raise
            return existing

        logger.info(f"User {viewer.id} favorited business {business_id}")
        return favorite

    def remove(self, viewer: Viewer, business_id: UUID) -> bool:
        """Unfavorite. Removing something that isn't there is a no-op."""
        removed = self.store.delete_favorite(viewer.id, business_id)
        if removed:
            logger.info(f"User {viewer.id} unfavorited business {business_id}")
        return removed

    def is_favorited(self, viewer: Viewer, business_id: UUID) -> bool:
        return self.store.get_favorite(viewer.id, business_id) is not None

    def favorited_ids(self, viewer: Viewer, business_ids: list[UUID]) -> set[UUID]:
        """Subset of `business_ids` the viewer has favorited, in one query."""
        if not business_ids:
            return set()
        return self.store.favorited_ids(viewer.id, list(dict.fromkeys(business_ids)))

    def list_for_user(
        self,
        viewer: Viewer,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[Business]:
        """
        The viewer's favorite businesses that are currently active.

        Favorites of businesses that left active status are kept but not listed.
        """
        page = clamp_page(page)
        limit = clamp_limit(limit, self.settings.DEFAULT_PAGE_SIZE, self.settings.MAX_PAGE_SIZE)
        businesses, total = self.store.list_favorite_businesses(viewer.id, limit, (page - 1) * limit)

        return Page[Business](
            items=businesses,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
        )

    def count_for_business(self, business_id: UUID) -> int:
        return self.store.count_favorites(business_id)

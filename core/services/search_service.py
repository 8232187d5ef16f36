# =============================================================================
# core/services/search_service.py - Search & Aggregation Pipeline
# =============================================================================
# Turns a location query into a ranked, enriched page of businesses:
#
#   1. validate coordinates, clamp radius and paging
#   2. spatial query (distance-ordered with a center, newest first without)
#   3. batch rating summaries for the page's ids (one round trip)
#   4. batch favorite lookup for the viewer (skipped for anonymous callers)
#   5. logo URLs signed in parallel, bounded pool, per-page time budget
#   6. reassemble in step-2 order and attach the pagination block
#
# Failure policy:
# - step 2 failing fails the request
# - InfrastructureError or a timeout in steps 3-5 degrades only the
#   affected results (no logo, zero rating, not favorited)
# - any other exception is a bug and propagates
# =============================================================================

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from uuid import UUID

from app.config import Settings
from app.exceptions import InfrastructureError, InvalidCoordinatesError, PermissionDeniedError
from core.models.business import BusinessStatus, Viewer
from core.models.media import MediaType
from core.models.rating import RatingBrief, RatingSummary
from core.models.search import BusinessDetail, EnrichedBusiness, Pagination, SearchFilters, SearchPage
from core.services.business_service import get_visible_business, sort_hours
from core.services.favorite_service import FavoriteService
from core.services.media_service import MediaService
from core.services.rating_service import RatingService
from lib.store import MarketplaceStore, SpatialHit, SpatialQuery
from lib.utils import (
    clamp_limit,
    clamp_page,
    clamp_radius_km,
    is_valid_coordinate_pair,
    total_pages,
)

logger = logging.getLogger(__name__)


class SearchService:
    """
    Discovery read side: search, nearby and the business detail payload.

    Example:
        page = search_service.search(SearchFilters(latitude=-26.2, longitude=28.0, radius_km=10))
        for business in page.results:
            print(business.name, business.distance_km, business.rating.average)
    """

    def __init__(
        self,
        store: MarketplaceStore,
        ratings: RatingService,
        favorites: FavoriteService,
        media: MediaService,
        settings: Settings,
    ):
        self.store = store
        self.ratings = ratings
        self.favorites = favorites
        self.media = media
        self.settings = settings

    # -------------------------------------------------------------------------
    # Entry Points
    # -------------------------------------------------------------------------

    def search(self, filters: SearchFilters, viewer: Viewer | None = None) -> SearchPage:
        """
        Run the full pipeline for one page.

        Raises:
            InvalidCoordinatesError: If coordinates are out of range or incomplete
            PermissionDeniedError: If a non-admin asks for every status
            InfrastructureError: If the spatial query itself fails
        """
        query, page, limit = self._build_query(filters, viewer)

        result = self.store.search_businesses(query)
        results = self._enrich(result.hits, viewer)

        total = result.total
        if not result.hits and page > 1:
            total = None

        logger.debug(f"Search returned {len(results)} results (page {page}, total {total})")
        return SearchPage(
            results=results,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
        )

    def nearby(
        self,
        latitude: float | None,
        longitude: float | None,
        radius_m: float | None = None,
        viewer: Viewer | None = None,
        page: int | None = None,
        limit: int | None = None,
        category: str | None = None,
    ) -> SearchPage:
        """
        Search around a point with the radius given in meters.

        Same clamping and enrichment as search(); a center is mandatory.
        """
        if latitude is None or longitude is None:
            raise InvalidCoordinatesError(latitude, longitude)

        radius_m = self.settings.NEARBY_DEFAULT_RADIUS_M if radius_m is None else radius_m
        filters = SearchFilters(
            latitude=latitude,
            longitude=longitude,
            radius_km=radius_m / 1000,
            category=category,
            page=page,
            limit=limit,
        )
        return self.search(filters, viewer)

    def get_business_detail(self, business_id: UUID, viewer: Viewer | None = None) -> BusinessDetail:
        """
        Everything the business page shows, in one payload.

        Non-active businesses are not found unless the viewer owns them or is an admin.
        """
        business = get_visible_business(self.store, business_id, viewer)

        media = self.media.with_urls(self.store.list_media(business_id))
        logo = next((asset for asset in media if asset.media_type == MediaType.LOGO), None)
        photos = [asset for asset in media if asset.media_type == MediaType.PHOTO]

        detail = BusinessDetail(
            **business.model_dump(),
            media=media,
            logo_url=logo.url if logo else None,
            photos=photos,
            hours=sort_hours(self.store.get_hours(business_id)),
            categories=self.store.get_categories(business_id),
        )

        try:
            detail.rating_summary = self.ratings.summary(business_id)
        except InfrastructureError as e:
            logger.warning(f"Rating summary unavailable for {business_id}: {e.message}")
            detail.rating_summary = RatingSummary()

        try:
            detail.favorite_count = self.favorites.count_for_business(business_id)
        except InfrastructureError as e:
            logger.warning(f"Favorite count unavailable for {business_id}: {e.message}")

        if viewer is not None:
            detail.is_favorited = self.favorites.is_favorited(viewer, business_id)
            detail.viewer_rating = self.ratings.get_viewer_rating(business_id, viewer)

        return detail

    # -------------------------------------------------------------------------
    # Step 1: Query Building
    # -------------------------------------------------------------------------

    def _build_query(self, filters: SearchFilters, viewer: Viewer | None) -> tuple[SpatialQuery, int, int]:
        latitude, longitude, radius_km = None, None, None
        if filters.has_center:
            if not is_valid_coordinate_pair(filters.latitude, filters.longitude):
                raise InvalidCoordinatesError(filters.latitude, filters.longitude)
            latitude, longitude = float(filters.latitude), float(filters.longitude)
            radius_km = clamp_radius_km(
                filters.radius_km,
                self.settings.SEARCH_DEFAULT_RADIUS_KM,
                self.settings.SEARCH_MIN_RADIUS_KM,
                self.settings.SEARCH_MAX_RADIUS_KM,
            )

        if filters.include_all_statuses:
            if viewer is None or not viewer.is_admin:
                raise PermissionDeniedError("search businesses in every status", reason="admin only")
            visible_statuses = None
            visible_owner_id = None
        else:
            visible_statuses = (BusinessStatus.ACTIVE,)
            visible_owner_id = viewer.id if viewer is not None else None

        page = clamp_page(filters.page)
        limit = clamp_limit(filters.limit, self.settings.DEFAULT_PAGE_SIZE, self.settings.MAX_PAGE_SIZE)

        query = SpatialQuery(
            limit=limit,
            offset=(page - 1) * limit,
            latitude=latitude,
            longitude=longitude,
            radius_km=radius_km,
            query=filters.query.strip() if filters.query and filters.query.strip() else None,
            city=filters.city.strip() if filters.city and filters.city.strip() else None,
            category=filters.category or None,
            visible_statuses=visible_statuses,
            visible_owner_id=visible_owner_id,
            status=filters.status,
            verification_status=filters.verification_status,
        )
        return query, page, limit

    # -------------------------------------------------------------------------
    # Steps 3-6: Enrichment
    # -------------------------------------------------------------------------

    def _enrich(self, hits: list[SpatialHit], viewer: Viewer | None) -> list[EnrichedBusiness]:
        if not hits:
            return []

        ids = [hit.business.id for hit in hits]
        ratings = self._fetch_ratings(ids)
        favorited = self._fetch_favorites(ids, viewer)
        logo_urls = self._resolve_logos(ids)

        results: list[EnrichedBusiness | None] = [None] * len(hits)
        for index, hit in enumerate(hits):
            business_id = hit.business.id
            results[index] = EnrichedBusiness(
                **hit.business.model_dump(),
                distance_km=round(hit.distance_km, 3) if hit.distance_km is not None else None,
                rating=ratings.get(business_id, RatingBrief()),
                logo_url=logo_urls.get(business_id),
                is_favorited=(business_id in favorited) if favorited is not None else None,
            )
        return results

    def _fetch_ratings(self, ids: list[UUID]) -> dict[UUID, RatingBrief]:
        try:
            return self.ratings.batch_summary(ids)
        except InfrastructureError as e:
            logger.warning(f"Rating summaries unavailable, defaulting to zero: {e.message}")
            return {}

    def _fetch_favorites(self, ids: list[UUID], viewer: Viewer | None) -> set[UUID] | None:
        """None for anonymous viewers, so nobody sees another user's state."""
        if viewer is None:
            return None
        try:
            return self.favorites.favorited_ids(viewer, ids)
        except InfrastructureError as e:
            logger.warning(f"Favorites unavailable for {viewer.id}, defaulting to none: {e.message}")
            return set()

    def _resolve_logos(self, ids: list[UUID]) -> dict[UUID, str]:
        """
        Sign logo URLs concurrently.

        Each signing call is independent; a call that fails with an
        InfrastructureError or misses the page's time budget leaves that
        result without a logo.
        """
        try:
            paths = self.media.logo_paths(ids)
        except InfrastructureError as e:
            logger.warning(f"Logo lookup unavailable, returning results without logos: {e.message}")
            return {}
        if not paths:
            return {}

        urls: dict[UUID, str] = {}
        workers = min(len(paths), self.settings.ENRICHMENT_MAX_WORKERS)
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="logo-sign")
        try:
            futures = {
                executor.submit(self.media.resolve_download_url, path): business_id
                for business_id, path in paths.items()
            }
            done, not_done = wait(futures, timeout=self.settings.ENRICHMENT_TIMEOUT_SECONDS)

            for future in done:
                business_id = futures[future]
                try:
                    urls[business_id] = future.result()
                except InfrastructureError as e:
                    logger.warning(f"Logo URL failed for business {business_id}: {e.message}")

            if not_done:
                logger.warning(
                    f"{len(not_done)} logo URL(s) missed the "
                    f"{self.settings.ENRICHMENT_TIMEOUT_SECONDS}s budget"
                )
        finally:
            # Never wait on a hung storage call
            executor.shutdown(wait=False, cancel_futures=True)

        return urls

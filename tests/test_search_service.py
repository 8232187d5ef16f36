# =============================================================================
# tests/test_search_service.py - Search Pipeline Tests
# =============================================================================
# Spatial filtering, visibility, paging and the degraded-enrichment rules.
#
# Run with: pytest tests/test_search_service.py -v
# =============================================================================

from unittest.mock import patch
from uuid import uuid4

import pytest

from app.exceptions import (
    BusinessNotFoundError,
    InvalidCoordinatesError,
    PermissionDeniedError,
    StoreUnavailableError,
)
from core.models import BusinessStatus, MediaType, SearchFilters, VerificationStatus
from core.services.search_service import SearchService

CENTER = {"latitude": -26.2, "longitude": 28.0}


def add_logo(store, business):
    path = f"businesses/{business.id}/logo/{uuid4().hex}.png"
    store.insert_media({"business_id": business.id, "media_type": MediaType.LOGO, "storage_path": path})
    return path


@pytest.fixture
def johannesburg(store):
    """Five businesses within ~6 km of the center and two in other cities."""
    inside = [
        store.add_business(name=f"Local {index}", latitude=-26.2 - 0.01 * index, longitude=28.0)
        for index in range(1, 6)
    ]
    outside = [
        store.add_business(name="Cape Town Deli", latitude=-33.9249, longitude=18.4241, city="Cape Town"),
        store.add_business(name="Durban Surf", latitude=-29.8587, longitude=31.0218, city="Durban"),
    ]
    return inside, outside


# =============================================================================
# Spatial Filtering
# =============================================================================

class TestSpatial:
    def test_only_businesses_inside_radius(self, services, johannesburg):
        inside, _ = johannesburg

        page = services.search.search(SearchFilters(**CENTER, radius_km=10))

        assert {result.id for result in page.results} == {business.id for business in inside}
        assert page.pagination.total == 5

    def test_ordered_by_distance(self, services, johannesburg):
        page = services.search.search(SearchFilters(**CENTER, radius_km=10))

        distances = [result.distance_km for result in page.results]
        assert distances == sorted(distances)
        assert all(distance <= 10 for distance in distances)

    def test_larger_radius_never_loses_results(self, services, johannesburg):
        small = services.search.search(SearchFilters(**CENTER, radius_km=3))
        large = services.search.search(SearchFilters(**CENTER, radius_km=50))

        assert {r.id for r in small.results} <= {r.id for r in large.results}
        assert small.pagination.total == 2
        assert large.pagination.total == 5

    def test_huge_radius_is_clamped(self, services, johannesburg):
        # Durban is ~503 km away, just past the maximum radius
        page = services.search.search(SearchFilters(**CENTER, radius_km=10_000))

        assert "Durban Surf" not in {result.name for result in page.results}

    def test_tiny_radius_is_clamped_up(self, services, store):
        close = store.add_business(latitude=-26.208, longitude=28.0)

        page = services.search.search(SearchFilters(**CENTER, radius_km=0.2))

        assert [result.id for result in page.results] == [close.id]

    def test_without_center_newest_first(self, services, store):
        older = store.add_business(name="Older")
        newer = store.add_business(name="Newer")

        page = services.search.search(SearchFilters())

        assert [result.id for result in page.results] == [newer.id, older.id]
        assert page.results[0].distance_km is None

    @pytest.mark.parametrize(
        "latitude,longitude",
        [(91, 28.0), (-26.2, 181), (-26.2, None), (None, 28.0)],
    )
    def test_invalid_coordinates(self, services, store, latitude, longitude):
        with pytest.raises(InvalidCoordinatesError):
            services.search.search(SearchFilters(latitude=latitude, longitude=longitude))
        assert "search_businesses" not in store.calls

    def test_text_city_and_category_filters(self, services, store):
        coffee = store.add_business(name="Kasi Coffee", city="Soweto")
        store.add_business(name="Kasi Tyres", city="Soweto")
        store.add_business(name="Coffee Elsewhere", city="Pretoria")
        store.categories[coffee.id] = {"Food & Drink"}

        by_text = services.search.search(SearchFilters(query="  coffee ", city="soweto"))
        by_category = services.search.search(SearchFilters(category="Food & Drink"))

        assert [result.id for result in by_text.results] == [coffee.id]
        assert [result.id for result in by_category.results] == [coffee.id]


# =============================================================================
# Visibility
# =============================================================================

class TestVisibility:
    def test_anonymous_sees_only_active(self, services, store):
        active = store.add_business()
        store.add_business(status=BusinessStatus.DRAFT)
        store.add_business(status=BusinessStatus.SUSPENDED)

        page = services.search.search(SearchFilters())

        assert [result.id for result in page.results] == [active.id]

    def test_owner_also_sees_own_drafts(self, services, store, supplier):
        active = store.add_business()
        draft = store.add_business(owner_id=supplier.id, status=BusinessStatus.DRAFT)
        store.add_business(status=BusinessStatus.DRAFT)

        page = services.search.search(SearchFilters(), supplier)

        assert {result.id for result in page.results} == {active.id, draft.id}

    def test_all_statuses_requires_admin(self, services, supplier):
        with pytest.raises(PermissionDeniedError):
            services.search.search(SearchFilters(include_all_statuses=True), supplier)
        with pytest.raises(PermissionDeniedError):
            services.search.search(SearchFilters(include_all_statuses=True))

    def test_admin_sees_everything_and_can_narrow(self, services, store, admin):
        store.add_business()
        pending = store.add_business(status=BusinessStatus.PENDING, verification_status=VerificationStatus.APPROVED)
        store.add_business(status=BusinessStatus.ARCHIVED)

        everything = services.search.search(SearchFilters(include_all_statuses=True), admin)
        narrowed = services.search.search(
            SearchFilters(include_all_statuses=True, status=BusinessStatus.PENDING), admin
        )
        verified = services.search.search(
            SearchFilters(include_all_statuses=True, verification_status=VerificationStatus.APPROVED), admin
        )

        assert everything.pagination.total == 3
        assert [result.id for result in narrowed.results] == [pending.id]
        assert [result.id for result in verified.results] == [pending.id]

    def test_status_filter_cannot_widen_visibility(self, services, store):
        store.add_business(status=BusinessStatus.SUSPENDED)

        page = services.search.search(SearchFilters(status=BusinessStatus.SUSPENDED))

        assert page.results == []


# =============================================================================
# Pagination
# =============================================================================

class TestPagination:
    def test_pages_split_results(self, services, store):
        for index in range(5):
            store.add_business(name=f"Business {index}")

        first = services.search.search(SearchFilters(page=1, limit=2))
        last = services.search.search(SearchFilters(page=3, limit=2))

        assert len(first.results) == 2
        assert len(last.results) == 1
        assert first.pagination.total == 5
        assert first.pagination.total_pages == 3

    def test_empty_first_page_has_zero_total(self, services):
        page = services.search.search(SearchFilters())

        assert page.results == []
        assert page.pagination.total == 0
        assert page.pagination.total_pages == 0

    def test_page_past_the_end_has_unknown_total(self, services, store):
        store.add_business()

        page = services.search.search(SearchFilters(page=4, limit=20))

        assert page.results == []
        assert page.pagination.total is None
        assert page.pagination.total_pages is None

    def test_paging_values_clamped(self, services):
        page = services.search.search(SearchFilters(page=0, limit=10_000))

        assert page.pagination.page == 1
        assert page.pagination.limit == 100


# =============================================================================
# Enrichment
# =============================================================================

class TestEnrichment:
    def test_full_enrichment(self, services, store, storage, consumer):
        business = store.add_business()
        add_logo(store, business)
        services.ratings.upsert(business.id, consumer, 4)
        services.favorites.add(consumer, business.id)

        result = services.search.search(SearchFilters(**CENTER), consumer).results[0]

        assert result.rating.average == 4.0
        assert result.rating.count == 1
        assert result.is_favorited is True
        assert result.logo_url.startswith("https://storage.test/")

    def test_anonymous_never_gets_favorite_state(self, services, store, consumer):
        business = store.add_business()
        services.favorites.add(consumer, business.id)

        result = services.search.search(SearchFilters()).results[0]

        assert result.is_favorited is None
        assert "favorited_ids" not in store.calls

    def test_ratings_outage_degrades_to_zero(self, services, store, consumer):
        business = store.add_business()
        services.ratings.upsert(business.id, consumer, 5)
        store.fail_on.add("rating_summaries")

        result = services.search.search(SearchFilters()).results[0]

        assert result.id == business.id
        assert result.rating.count == 0
        assert result.rating.average == 0

    def test_favorites_outage_degrades_to_not_favorited(self, services, store, consumer):
        business = store.add_business()
        services.favorites.add(consumer, business.id)
        store.fail_on.add("favorited_ids")

        result = services.search.search(SearchFilters(), consumer).results[0]

        assert result.is_favorited is False

    def test_logo_lookup_outage_drops_all_logos(self, services, store):
        business = store.add_business()
        add_logo(store, business)
        store.fail_on.add("logo_paths")

        result = services.search.search(SearchFilters()).results[0]

        assert result.logo_url is None

    def test_one_failed_logo_only_affects_its_result(self, services, store, storage):
        broken = store.add_business(name="Broken logo")
        fine = store.add_business(name="Fine logo")
        storage.failing_paths.add(add_logo(store, broken))
        add_logo(store, fine)

        results = {result.id: result for result in services.search.search(SearchFilters()).results}

        assert results[broken.id].logo_url is None
        assert results[fine.id].logo_url is not None

    def test_slow_logo_misses_budget(self, services, store, storage, settings):
        slow = store.add_business(name="Slow")
        fast = store.add_business(name="Fast")
        storage.slow_paths.add(add_logo(store, slow))
        storage.delay = 0.5
        add_logo(store, fast)
        impatient = settings.model_copy(update={"ENRICHMENT_TIMEOUT_SECONDS": 0.1})
        search = SearchService(store, services.ratings, services.favorites, services.media, impatient)

        results = {result.id: result for result in search.search(SearchFilters()).results}

        assert results[slow.id].logo_url is None
        assert results[fast.id].logo_url is not None

    def test_spatial_failure_fails_request(self, services, store):
        store.add_business()
        store.fail_on.add("search_businesses")

        with pytest.raises(StoreUnavailableError):
            services.search.search(SearchFilters())

    def test_programming_errors_propagate(self, services, store):
        store.add_business()

        with patch.object(services.ratings, "batch_summary", side_effect=ValueError("bug")):
            with pytest.raises(ValueError):
                services.search.search(SearchFilters())


# =============================================================================
# Nearby & Detail
# =============================================================================

class TestNearby:
    def test_radius_in_meters(self, services, johannesburg):
        page = services.search.nearby(-26.2, 28.0, radius_m=2500)

        # Local 1 and Local 2 sit ~1.1 km and ~2.2 km from the center
        assert [result.name for result in page.results] == ["Local 1", "Local 2"]

    def test_default_radius(self, services, johannesburg):
        page = services.search.nearby(-26.2, 28.0)

        assert page.pagination.total == 5

    def test_coordinates_required(self, services):
        with pytest.raises(InvalidCoordinatesError):
            services.search.nearby(None, 28.0)


class TestDetail:
    def test_detail_payload(self, services, store, consumer):
        business = store.add_business()
        logo_path = add_logo(store, business)
        store.categories[business.id] = {"Crafts"}
        services.ratings.upsert(business.id, consumer, 5, "Lovely work")
        services.favorites.add(consumer, business.id)

        detail = services.search.get_business_detail(business.id, consumer)

        assert detail.logo_url is not None and logo_path in detail.logo_url
        assert detail.photos == []
        assert detail.categories == ["Crafts"]
        assert detail.rating_summary.count == 1
        assert detail.favorite_count == 1
        assert detail.is_favorited is True
        assert detail.viewer_rating.rating == 5

    def test_anonymous_detail_has_no_viewer_state(self, services, store):
        business = store.add_business()

        detail = services.search.get_business_detail(business.id)

        assert detail.is_favorited is None
        assert detail.viewer_rating is None

    def test_draft_detail_is_not_found_for_strangers(self, services, store, consumer):
        business = store.add_business(status=BusinessStatus.DRAFT)

        with pytest.raises(BusinessNotFoundError):
            services.search.get_business_detail(business.id, consumer)

    def test_rating_outage_degrades_detail(self, services, store):
        business = store.add_business()
        store.fail_on.add("rating_summary")

        detail = services.search.get_business_detail(business.id)

        assert detail.rating_summary.count == 0

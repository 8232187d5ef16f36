# =============================================================================
# tests/test_favorite_service.py - Favorite Overlay Tests
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import BusinessNotFoundError, DuplicateRowError
from core.models import BusinessStatus


class TestAddRemove:
    def test_add_is_idempotent(self, services, store, consumer):
        business = store.add_business()

        first = services.favorites.add(consumer, business.id)
        second = services.favorites.add(consumer, business.id)

        assert second.id == first.id
        assert services.favorites.count_for_business(business.id) == 1

    def test_remove_missing_is_noop(self, services, store, consumer):
        business = store.add_business()

        assert services.favorites.remove(consumer, business.id) is False

    def test_cannot_favorite_hidden_business(self, services, store, consumer):
        business = store.add_business(status=BusinessStatus.PENDING)

        with pytest.raises(BusinessNotFoundError):
            services.favorites.add(consumer, business.id)

    def test_stale_duplicate_is_reraised(self, services, store, consumer):
        business = store.add_business()

        # Insert reports a duplicate but the row is gone by the time we look
        with patch.object(store, "insert_favorite", side_effect=DuplicateRowError("favorites")):
            with pytest.raises(DuplicateRowError):
                services.favorites.add(consumer, business.id)


class TestLookup:
    def test_favorited_ids_is_per_viewer(self, services, store, consumer, supplier):
        mine = store.add_business()
        theirs = store.add_business()
        services.favorites.add(consumer, mine.id)
        services.favorites.add(supplier, theirs.id)

        assert services.favorites.favorited_ids(consumer, [mine.id, theirs.id]) == {mine.id}

    def test_favorited_ids_empty_input_skips_store(self, services, store, consumer):
        assert services.favorites.favorited_ids(consumer, []) == set()
        assert store.calls == []


class TestListing:
    def test_lists_only_active_businesses(self, services, store, consumer, admin):
        active = store.add_business(name="Active")
        later_suspended = store.add_business(name="Suspended later")
        services.favorites.add(consumer, active.id)
        services.favorites.add(consumer, later_suspended.id)
        services.businesses.suspend(later_suspended.id, admin)

        page = services.favorites.list_for_user(consumer)

        assert [business.id for business in page.items] == [active.id]
        assert page.pagination.total == 1

    def test_hidden_favorite_comes_back_on_reactivation(self, services, store, consumer, admin):
        business = store.add_business()
        services.favorites.add(consumer, business.id)
        services.businesses.suspend(business.id, admin)
        services.businesses.reactivate(business.id, admin)

        page = services.favorites.list_for_user(consumer)

        assert [item.id for item in page.items] == [business.id]

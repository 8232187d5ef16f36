# =============================================================================
# tests/test_supabase_store.py - Supabase Store Tests
# =============================================================================
# Query building and PostgREST error mapping, against a mocked client.
# =============================================================================

from unittest.mock import MagicMock
from uuid import uuid4

import httpx
import pytest
from postgrest.exceptions import APIError

from app.exceptions import (
    BusinessAlreadyVerifiedError,
    BusinessNotFoundError,
    ConflictError,
    DuplicateRowError,
    EmptyUpdateError,
    InvalidInputError,
    LogoAlreadyExistsError,
    PhotoLimitExceededError,
    StoreUnavailableError,
    VerificationAlreadyPendingError,
    VerificationRequestNotFoundError,
)
from core.models import BusinessStatus, MediaType, VerificationStatus
from lib.store import SpatialQuery
from lib.supabase_client import SupabaseStore

BUILDER_METHODS = ("select", "eq", "in_", "order", "limit", "range", "insert", "update", "upsert", "delete")


def make_client(data=None, count=None, error=None):
    """A client whose every query chain ends in the same execute()."""
    query = MagicMock()
    for name in BUILDER_METHODS:
        getattr(query, name).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=data, count=count)

    client = MagicMock()
    client.table.return_value = query
    client.rpc.return_value = query
    return client, query


def api_error(code, message="", details=None):
    return APIError({"code": code, "message": message, "details": details, "hint": None})


def business_row(**overrides):
    row = {
        "id": str(uuid4()),
        "owner_id": str(uuid4()),
        "name": "Kasi Coffee",
        "latitude": -26.2,
        "longitude": 28.0,
        "city": "Johannesburg",
        "status": "active",
        "verification_status": "pending",
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_store(settings):
    def _make(**kwargs):
        client, query = make_client(**kwargs)
        return SupabaseStore(client, settings), client, query
    return _make


# =============================================================================
# Error Mapping
# =============================================================================

class TestErrorMapping:
    def test_unique_violation_default(self, make_store):
        store, _, _ = make_store(error=api_error("23505", "duplicate key", "Key (id)=(x) already exists."))

        with pytest.raises(DuplicateRowError) as exc_info:
            store.insert_business({"name": "Kasi Coffee"})

        assert exc_info.value.details["table"] == "businesses"

    def test_unique_violation_caller_specific(self, make_store):
        store, _, _ = make_store(
            error=api_error("23505", "duplicate key value violates unique constraint \"business_media_one_logo\"")
        )

        with pytest.raises(LogoAlreadyExistsError):
            store.insert_media({"business_id": uuid4(), "media_type": MediaType.LOGO, "storage_path": "p"})

    def test_unique_violation_on_other_constraint(self, make_store):
        # A reused storage path is not a second logo
        store, _, _ = make_store(
            error=api_error(
                "23505",
                "duplicate key value violates unique constraint \"business_media_storage_path_key\"",
                "Key (storage_path)=(businesses/1/photo/a.jpg) already exists.",
            )
        )

        with pytest.raises(DuplicateRowError) as exc_info:
            store.insert_media({"business_id": uuid4(), "media_type": MediaType.PHOTO, "storage_path": "p"})

        assert not isinstance(exc_info.value, LogoAlreadyExistsError)
        assert exc_info.value.details["table"] == "business_media"
        assert "storage_path" in exc_info.value.constraint

    def test_pending_request_unique_violation(self, make_store):
        store, _, _ = make_store(
            error=api_error("23505", "duplicate key value violates unique constraint \"verification_requests_one_pending\"")
        )

        with pytest.raises(VerificationAlreadyPendingError):
            store.submit_verification_request(uuid4(), uuid4(), None)

    def test_conflict_token(self, make_store):
        store, _, _ = make_store(error=api_error("LK409", "PHOTO_LIMIT_EXCEEDED"))

        with pytest.raises(PhotoLimitExceededError):
            store.insert_media({"business_id": uuid4(), "media_type": MediaType.PHOTO, "storage_path": "p"})

    def test_unknown_conflict_token(self, make_store):
        store, _, _ = make_store(error=api_error("LK409", "SOMETHING_NEW"))

        with pytest.raises(ConflictError) as exc_info:
            store.delete_document(uuid4(), uuid4())

        assert exc_info.value.code == "CONFLICT"

    def test_foreign_key_violation(self, make_store):
        store, _, _ = make_store(error=api_error("23503", "violates foreign key constraint"))

        with pytest.raises(BusinessNotFoundError):
            store.insert_favorite(uuid4(), uuid4())

    def test_function_not_found(self, make_store):
        store, _, _ = make_store(error=api_error("LK404", "VERIFICATION_REQUEST_NOT_FOUND"))

        with pytest.raises(VerificationRequestNotFoundError):
            store.review_verification_request(uuid4(), uuid4(), VerificationStatus.APPROVED, None)

    def test_submit_conflicts(self, make_store):
        store, _, _ = make_store(error=api_error("LK409", "BUSINESS_ALREADY_VERIFIED"))

        with pytest.raises(BusinessAlreadyVerifiedError):
            store.submit_verification_request(uuid4(), uuid4(), None)

    def test_check_violation(self, make_store):
        store, _, _ = make_store(error=api_error("23514", "violates check constraint \"ratings_rating_check\""))

        with pytest.raises(InvalidInputError):
            store.upsert_rating(uuid4(), uuid4(), 9, None)

    def test_other_database_errors_are_infrastructure(self, make_store):
        store, _, _ = make_store(error=api_error("57014", "canceling statement due to statement timeout"))

        with pytest.raises(StoreUnavailableError) as exc_info:
            store.get_business(uuid4())

        assert "57014" in exc_info.value.message

    def test_transport_errors_are_infrastructure(self, make_store):
        store, _, _ = make_store(error=httpx.ConnectError("connection refused"))

        with pytest.raises(StoreUnavailableError):
            store.ping()


# =============================================================================
# Reads & Writes
# =============================================================================

class TestBusinesses:
    def test_get_missing_business(self, make_store):
        store, client, query = make_store(data=[])

        assert store.get_business(uuid4()) is None
        client.table.assert_called_with("businesses")

    def test_get_business(self, make_store):
        row = business_row()
        store, _, _ = make_store(data=[row])

        business = store.get_business(row["id"])

        assert str(business.id) == row["id"]
        assert business.status == BusinessStatus.ACTIVE

    def test_empty_update_never_reaches_database(self, make_store):
        store, client, _ = make_store(data=[])

        with pytest.raises(EmptyUpdateError):
            store.update_business(uuid4(), {})

        client.table.assert_not_called()

    def test_transition_is_conditional_on_current_status(self, make_store):
        store, _, query = make_store(data=[])

        result = store.transition_business_status(
            uuid4(), [BusinessStatus.ACTIVE], {"status": BusinessStatus.SUSPENDED}
        )

        assert result is None
        query.in_.assert_called_with("status", ["active"])
        query.update.assert_called_with({"status": "suspended"})


class TestSearch:
    def test_rows_become_hits_with_total(self, make_store):
        rows = [
            business_row(distance_km=1.25, total_count=7),
            business_row(distance_km=2.5, total_count=7),
        ]
        store, client, _ = make_store(data=rows)

        result = store.search_businesses(SpatialQuery(limit=2, latitude=-26.2, longitude=28.0, radius_km=10))

        assert result.total == 7
        assert [hit.distance_km for hit in result.hits] == [1.25, 2.5]
        name, params = client.rpc.call_args.args
        assert name == "search_businesses"
        assert params["p_radius_km"] == 10
        assert params["p_visible_statuses"] == ["active"]

    def test_radius_dropped_without_center(self, make_store):
        store, client, _ = make_store(data=[])

        store.search_businesses(SpatialQuery(limit=20, radius_km=10, visible_statuses=None))

        params = client.rpc.call_args.args[1]
        assert params["p_radius_km"] is None
        assert params["p_visible_statuses"] is None

    def test_empty_first_page_is_zero(self, make_store):
        store, _, _ = make_store(data=[])

        assert store.search_businesses(SpatialQuery(limit=20)).total == 0

    def test_empty_later_page_is_unknown(self, make_store):
        store, _, _ = make_store(data=[])

        assert store.search_businesses(SpatialQuery(limit=20, offset=40)).total is None


class TestRatings:
    def test_summary_fills_histogram(self, make_store):
        store, _, _ = make_store(
            data=[{"average_rating": "4.333", "rating_count": 3, "histogram": {"4": 2, "5": 1}}]
        )

        summary = store.rating_summary(uuid4())

        assert summary.average == 4.33
        assert summary.count == 3
        assert summary.histogram == {1: 0, 2: 0, 3: 0, 4: 2, 5: 1}

    def test_summary_without_ratings(self, make_store):
        store, _, _ = make_store(data=[{"average_rating": None, "rating_count": 0, "histogram": None}])

        summary = store.rating_summary(uuid4())

        assert summary.count == 0
        assert summary.average == 0

    def test_batch_summaries_skip_empty_input(self, make_store):
        store, client, _ = make_store(data=[])

        assert store.rating_summaries([]) == {}
        client.rpc.assert_not_called()

    def test_list_uses_exact_count(self, make_store):
        store, _, query = make_store(data=[], count=12)

        ratings, total = store.list_ratings(uuid4(), limit=10, offset=10)

        assert ratings == []
        assert total == 12
        query.range.assert_called_with(10, 19)


class TestStats:
    def test_rpc_row_becomes_stats(self, make_store):
        store, client, _ = make_store(
            data=[
                {
                    "by_status": {"active": 4, "draft": 1},
                    "by_verification_status": {"approved": 2, "pending": 3},
                    "total_ratings": 9,
                    "total_favorites": 5,
                }
            ]
        )

        stats = store.business_stats()

        client.rpc.assert_called_once_with("business_stats", {})
        assert stats.total_businesses == 5
        assert stats.by_status[BusinessStatus.ACTIVE] == 4
        assert stats.by_status[BusinessStatus.ARCHIVED] == 0
        assert stats.by_verification_status[VerificationStatus.REJECTED] == 0
        assert stats.total_ratings == 9
        assert stats.total_favorites == 5

    def test_empty_database(self, make_store):
        store, _, _ = make_store(
            data=[{"by_status": {}, "by_verification_status": {}, "total_ratings": 0, "total_favorites": 0}]
        )

        stats = store.business_stats()

        assert stats.total_businesses == 0
        assert stats.total_favorites == 0

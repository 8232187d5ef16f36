# =============================================================================
# lib/supabase_client.py - Supabase Store
# =============================================================================
# PostgREST implementation of lib.store.MarketplaceStore.
#
# - Single-table reads and writes go through the table builder
# - Anything that must be atomic or spatial runs in a Postgres function
#   (see supabase/migrations/0001_lokolo_core.sql) called through rpc()
#
# Error mapping:
# - 23505 unique violation         -> conflict subclass chosen by constraint name,
#                                     else DuplicateRowError
# - 23503 foreign key violation    -> the caller-specific not-found error
# - LK409 raised by our functions  -> conflict subclass chosen by message token
# - LK404 raised by our functions  -> the caller-specific not-found error
# - anything else                  -> StoreUnavailableError
#
# Usage:
#   client = create_supabase_client(settings)
#   store = SupabaseStore(client, settings)
#   business = store.get_business(business_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Callable
from uuid import UUID

from postgrest.exceptions import APIError
from pydantic import TypeAdapter
from supabase import Client, ClientOptions, create_client

from app.config import MAX_DOCUMENTS_PER_REQUEST, MAX_PHOTOS_PER_BUSINESS, Settings
from app.exceptions import (
    BusinessAlreadyVerifiedError,
    BusinessArchivedError,
    BusinessNotFoundError,
    ConflictError,
    DocumentLimitExceededError,
    DuplicateRowError,
    EmptyUpdateError,
    InvalidInputError,
    LogoAlreadyExistsError,
    LokoloException,
    PhotoLimitExceededError,
    ResourceNotFoundError,
    StoreUnavailableError,
    VerificationAlreadyPendingError,
    VerificationAlreadyReviewedError,
    VerificationNotPendingError,
    VerificationRequestNotFoundError,
)
from core.models.business import (
    Business,
    BusinessHoursEntry,
    BusinessStats,
    BusinessStatus,
    VerificationStatus,
)
from core.models.favorite import Favorite
from core.models.media import MediaAsset, MediaType
from core.models.rating import Rating, RatingBrief, RatingSummary
from core.models.verification import VerificationDocument, VerificationRequest
from lib.store import SpatialHit, SpatialQuery, SpatialResult
from lib.utils import normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

# Custom SQLSTATEs raised by our Postgres functions and triggers
CONFLICT_SQLSTATE = "LK409"
NOT_FOUND_SQLSTATE = "LK404"
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"

# The generated `location` geography column is never sent to clients
BUSINESS_COLUMNS = (
    "id, owner_id, name, tagline, description, email, phone_number, whatsapp_number, "
    "website_url, latitude, longitude, address_line1, address_line2, city, province_state, "
    "postal_code, country, year_established, employee_count_range, status, "
    "verification_status, verified_at, rejection_reason, created_at, updated_at, published_at"
)

_json = TypeAdapter(Any)

ErrorFactory = Callable[[], LokoloException]


def create_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client with the service_role key.

    The service key bypasses Row Level Security, so all authorization
    happens in the services. PostgREST and Storage calls carry their own
    timeouts so a hung call surfaces as an error instead of a stuck request.
    """
    try:
        client = create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_KEY,
            options=ClientOptions(
                postgrest_client_timeout=settings.DB_TIMEOUT_SECONDS,
                storage_client_timeout=settings.STORAGE_TIMEOUT_SECONDS,
            ),
        )
        logger.info("Supabase client initialized successfully")
        return client
    except Exception as e:
        raise StoreUnavailableError("client_init", str(e)) from e


def _first(rows: list[dict[str, Any]] | None) -> dict[str, Any] | None:
    return rows[0] if rows else None


class SupabaseStore:
    """
    Typed store over a Supabase client.

    Every public method returns core.models records; raw rows never leave
    this class.
    """

    def __init__(self, client: Client, settings: Settings):
        self.client = client
        self.settings = settings

    # -------------------------------------------------------------------------
    # Execution & Error Mapping
    # -------------------------------------------------------------------------

    def _execute(
        self,
        operation: str,
        query: Any,
        *,
        table: str | None = None,
        duplicates: dict[str, ErrorFactory] | None = None,
        on_missing: ErrorFactory | None = None,
        conflicts: dict[str, ErrorFactory] | None = None,
    ) -> Any:
        """Run a built query, translating PostgREST failures into our taxonomy."""
        try:
            return query.execute()
        except APIError as e:
            raise self._translate(operation, e, table, duplicates, on_missing, conflicts) from e
        except Exception as e:
            logger.error(f"Store call {operation} failed: {e}")
            raise StoreUnavailableError(operation, str(e)) from e

    def _translate(
        self,
        operation: str,
        error: APIError,
        table: str | None,
        duplicates: dict[str, ErrorFactory] | None,
        on_missing: ErrorFactory | None,
        conflicts: dict[str, ErrorFactory] | None,
    ) -> LokoloException:
        code = error.code
        message = error.message or ""

        if code == UNIQUE_VIOLATION:
            # Postgres names the violated constraint in the message
            for constraint, factory in (duplicates or {}).items():
                if constraint in message:
                    return factory()
            return DuplicateRowError(table or operation, constraint=error.details or message)

        if code in (FOREIGN_KEY_VIOLATION, NOT_FOUND_SQLSTATE):
            if on_missing:
                return on_missing()
            return ResourceNotFoundError("Record", operation)

        if code == CONFLICT_SQLSTATE:
            token = message.strip()
            if conflicts and token in conflicts:
                return conflicts[token]()
            return ConflictError(message=message or f"Conflict during {operation}")

        if code == CHECK_VIOLATION:
            return InvalidInputError(message=message or f"Invalid values for {operation}")

        logger.error(f"Store call {operation} failed: [{code}] {message}")
        return StoreUnavailableError(operation, f"[{code}] {message}")

    @staticmethod
    def _payload(data: dict[str, Any]) -> dict[str, Any]:
        """UUIDs, enums and datetimes to JSON-safe values."""
        return _json.dump_python(data, mode="json")

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def ping(self) -> None:
        self._execute("ping", self.client.table("businesses").select("id").limit(1))

    # -------------------------------------------------------------------------
    # Businesses
    # -------------------------------------------------------------------------

    def get_business(self, business_id: UUID) -> Business | None:
        response = self._execute(
            "get_business",
            self.client.table("businesses")
            .select(BUSINESS_COLUMNS)
            .eq("id", normalize_uuid(business_id))
            .limit(1),
        )
        row = _first(response.data)
        return Business.model_validate(row) if row else None

    def list_businesses_by_owner(self, owner_id: UUID) -> list[Business]:
        response = self._execute(
            "list_businesses_by_owner",
            self.client.table("businesses")
            .select(BUSINESS_COLUMNS)
            .eq("owner_id", normalize_uuid(owner_id))
            .order("created_at", desc=True),
        )
        return [Business.model_validate(row) for row in response.data or []]

    def insert_business(self, data: dict[str, Any]) -> Business:
        response = self._execute(
            "insert_business",
            self.client.table("businesses").insert(self._payload(data)),
            table="businesses",
        )
        row = _first(response.data)
        if row is None:
            raise StoreUnavailableError("insert_business", "insert returned no data")
        row.pop("location", None)
        return Business.model_validate(row)

    def update_business(self, business_id: UUID, changes: dict[str, Any]) -> Business | None:
        if not changes:
            raise EmptyUpdateError("business")

        response = self._execute(
            "update_business",
            self.client.table("businesses")
            .update(self._payload(changes))
            .eq("id", normalize_uuid(business_id)),
        )
        row = _first(response.data)
        if row is None:
            return None
        row.pop("location", None)
        return Business.model_validate(row)

    def transition_business_status(
        self,
        business_id: UUID,
        allowed_from: list[BusinessStatus],
        changes: dict[str, Any],
    ) -> Business | None:
        """
        Compare-and-set status update.

        Only rows whose current status is in `allowed_from` are updated;
        None means the business was missing or had already moved on.
        """
        if not changes:
            raise EmptyUpdateError("business status")

        response = self._execute(
            "transition_business_status",
            self.client.table("businesses")
            .update(self._payload(changes))
            .eq("id", normalize_uuid(business_id))
            .in_("status", [status.value for status in allowed_from]),
        )
        row = _first(response.data)
        if row is None:
            return None
        row.pop("location", None)
        return Business.model_validate(row)

    def search_businesses(self, query: SpatialQuery) -> SpatialResult:
        params = {
            "p_query": query.query,
            "p_latitude": query.latitude,
            "p_longitude": query.longitude,
            "p_radius_km": query.radius_km if query.has_center else None,
            "p_city": query.city,
            "p_category": query.category,
            "p_visible_statuses": (
                [status.value for status in query.visible_statuses]
                if query.visible_statuses is not None
                else None
            ),
            "p_visible_owner": normalize_uuid(query.visible_owner_id) if query.visible_owner_id else None,
            "p_status": query.status.value if query.status else None,
            "p_verification_status": query.verification_status.value if query.verification_status else None,
            "p_limit": query.limit,
            "p_offset": query.offset,
        }
        response = self._execute("search_businesses", self.client.rpc("search_businesses", params))
        rows = response.data or []

        hits = []
        total = None
        for row in rows:
            total = row.pop("total_count", total)
            distance = row.pop("distance_km", None)
            hits.append(SpatialHit(business=Business.model_validate(row), distance_km=distance))

        # No rows at all on the first page is a known zero; past it we can't tell
        if not rows and query.offset == 0:
            total = 0
        return SpatialResult(hits=hits, total=total)

    def business_stats(self) -> BusinessStats:
        """Counts by status and verification status, plus rating and favorite totals."""
        response = self._execute("business_stats", self.client.rpc("business_stats", {}))
        row = _first(response.data) or {}
        return BusinessStats(
            by_status=row.get("by_status") or {},
            by_verification_status=row.get("by_verification_status") or {},
            total_ratings=row.get("total_ratings") or 0,
            total_favorites=row.get("total_favorites") or 0,
        )

    def get_categories(self, business_id: UUID) -> list[str]:
        response = self._execute(
            "get_categories",
            self.client.table("business_categories")
            .select("category_name")
            .eq("business_id", normalize_uuid(business_id))
            .order("category_name"),
        )
        return [row["category_name"] for row in response.data or []]

    def replace_categories(self, business_id: UUID, categories: list[str]) -> list[str]:
        self._execute(
            "replace_categories",
            self.client.rpc(
                "replace_business_categories",
                {"p_business_id": normalize_uuid(business_id), "p_categories": categories},
            ),
            on_missing=lambda: BusinessNotFoundError(business_id),
        )
        return self.get_categories(business_id)

    def get_hours(self, business_id: UUID) -> list[BusinessHoursEntry]:
        response = self._execute(
            "get_hours",
            self.client.table("business_hours")
            .select("day_of_week, opens_at, closes_at, is_closed, notes")
            .eq("business_id", normalize_uuid(business_id)),
        )
        return [BusinessHoursEntry.model_validate(row) for row in response.data or []]

    def replace_hours(self, business_id: UUID, entries: list[BusinessHoursEntry]) -> list[BusinessHoursEntry]:
        self._execute(
            "replace_hours",
            self.client.rpc(
                "replace_business_hours",
                {
                    "p_business_id": normalize_uuid(business_id),
                    "p_hours": [entry.model_dump(mode="json") for entry in entries],
                },
            ),
            on_missing=lambda: BusinessNotFoundError(business_id),
        )
        return self.get_hours(business_id)

    # -------------------------------------------------------------------------
    # Ratings
    # -------------------------------------------------------------------------

    def upsert_rating(self, business_id: UUID, user_id: UUID, rating: int, review_text: str | None) -> Rating:
        response = self._execute(
            "upsert_rating",
            self.client.table("ratings").upsert(
                {
                    "business_id": normalize_uuid(business_id),
                    "user_id": normalize_uuid(user_id),
                    "rating": rating,
                    "review_text": review_text,
                },
                on_conflict="user_id,business_id",
            ),
            on_missing=lambda: BusinessNotFoundError(business_id),
        )
        row = _first(response.data)
        if row is None:
            raise StoreUnavailableError("upsert_rating", "upsert returned no data")
        return Rating.model_validate(row)

    def get_rating(self, business_id: UUID, user_id: UUID) -> Rating | None:
        response = self._execute(
            "get_rating",
            self.client.table("ratings")
            .select("*")
            .eq("business_id", normalize_uuid(business_id))
            .eq("user_id", normalize_uuid(user_id))
            .limit(1),
        )
        row = _first(response.data)
        return Rating.model_validate(row) if row else None

    def delete_rating(self, business_id: UUID, user_id: UUID) -> bool:
        response = self._execute(
            "delete_rating",
            self.client.table("ratings")
            .delete()
            .eq("business_id", normalize_uuid(business_id))
            .eq("user_id", normalize_uuid(user_id)),
        )
        return bool(response.data)

    def rating_summary(self, business_id: UUID) -> RatingSummary:
        response = self._execute(
            "rating_summary",
            self.client.rpc("business_rating_summary", {"p_business_id": normalize_uuid(business_id)}),
        )
        row = _first(response.data)
        if not row or not row.get("rating_count"):
            return RatingSummary()

        histogram = {star: 0 for star in range(1, 6)}
        for star, count in (row.get("histogram") or {}).items():
            histogram[int(star)] = int(count)
        return RatingSummary(
            average=round(float(row["average_rating"]), 2),
            count=int(row["rating_count"]),
            histogram=histogram,
        )

    def rating_summaries(self, business_ids: list[UUID]) -> dict[UUID, RatingBrief]:
        if not business_ids:
            return {}
        response = self._execute(
            "rating_summaries",
            self.client.rpc(
                "business_rating_summaries",
                {"p_business_ids": [normalize_uuid(business_id) for business_id in business_ids]},
            ),
        )
        return {
            UUID(str(row["business_id"])): RatingBrief(
                average=round(float(row["average_rating"]), 2),
                count=int(row["rating_count"]),
            )
            for row in response.data or []
        }

    def list_ratings(self, business_id: UUID, limit: int, offset: int) -> tuple[list[Rating], int]:
        response = self._execute(
            "list_ratings",
            self.client.table("ratings")
            .select("*", count="exact")
            .eq("business_id", normalize_uuid(business_id))
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1),
        )
        return [Rating.model_validate(row) for row in response.data or []], response.count or 0

    # -------------------------------------------------------------------------
    # Favorites
    # -------------------------------------------------------------------------

    def insert_favorite(self, user_id: UUID, business_id: UUID) -> Favorite:
        response = self._execute(
            "insert_favorite",
            self.client.table("favorites").insert(
                {"user_id": normalize_uuid(user_id), "business_id": normalize_uuid(business_id)}
            ),
            table="favorites",
            on_missing=lambda: BusinessNotFoundError(business_id),
        )
        row = _first(response.data)
        if row is None:
            raise StoreUnavailableError("insert_favorite", "insert returned no data")
        return Favorite.model_validate(row)

    def get_favorite(self, user_id: UUID, business_id: UUID) -> Favorite | None:
        response = self._execute(
            "get_favorite",
            self.client.table("favorites")
            .select("*")
            .eq("user_id", normalize_uuid(user_id))
            .eq("business_id", normalize_uuid(business_id))
            .limit(1),
        )
        row = _first(response.data)
        return Favorite.model_validate(row) if row else None

    def delete_favorite(self, user_id: UUID, business_id: UUID) -> bool:
        response = self._execute(
            "delete_favorite",
            self.client.table("favorites")
            .delete()
            .eq("user_id", normalize_uuid(user_id))
            .eq("business_id", normalize_uuid(business_id)),
        )
        return bool(response.data)

    def favorited_ids(self, user_id: UUID, business_ids: list[UUID]) -> set[UUID]:
        if not business_ids:
            return set()
        response = self._execute(
            "favorited_ids",
            self.client.table("favorites")
            .select("business_id")
            .eq("user_id", normalize_uuid(user_id))
            .in_("business_id", [normalize_uuid(business_id) for business_id in business_ids]),
        )
        return {UUID(str(row["business_id"])) for row in response.data or []}

    def list_favorite_businesses(self, user_id: UUID, limit: int, offset: int) -> tuple[list[Business], int]:
        """Favorited businesses that are currently active, newest favorite first."""
        response = self._execute(
            "list_favorite_businesses",
            self.client.table("favorites")
            .select(f"created_at, businesses!inner({BUSINESS_COLUMNS})", count="exact")
            .eq("user_id", normalize_uuid(user_id))
            .eq("businesses.status", BusinessStatus.ACTIVE.value)
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1),
        )
        businesses = [Business.model_validate(row["businesses"]) for row in response.data or []]
        return businesses, response.count or 0

    def count_favorites(self, business_id: UUID) -> int:
        response = self._execute(
            "count_favorites",
            self.client.table("favorites")
            .select("id", count="exact")
            .eq("business_id", normalize_uuid(business_id))
            .limit(1),
        )
        return response.count or 0

    # -------------------------------------------------------------------------
    # Media
    # -------------------------------------------------------------------------

    def list_media(self, business_id: UUID) -> list[MediaAsset]:
        response = self._execute(
            "list_media",
            self.client.table("business_media")
            .select("*")
            .eq("business_id", normalize_uuid(business_id))
            .order("display_order")
            .order("created_at"),
        )
        return [MediaAsset.model_validate(row) for row in response.data or []]

    def get_media(self, media_id: UUID) -> MediaAsset | None:
        response = self._execute(
            "get_media",
            self.client.table("business_media").select("*").eq("id", normalize_uuid(media_id)).limit(1),
        )
        row = _first(response.data)
        return MediaAsset.model_validate(row) if row else None

    def count_media(self, business_id: UUID, media_type: MediaType) -> int:
        response = self._execute(
            "count_media",
            self.client.table("business_media")
            .select("id", count="exact")
            .eq("business_id", normalize_uuid(business_id))
            .eq("media_type", media_type.value)
            .limit(1),
        )
        return response.count or 0

    def insert_media(self, data: dict[str, Any]) -> MediaAsset:
        business_id = data.get("business_id")
        response = self._execute(
            "insert_media",
            self.client.table("business_media").insert(self._payload(data)),
            table="business_media",
            duplicates={"business_media_one_logo": lambda: LogoAlreadyExistsError(business_id)},
            on_missing=lambda: BusinessNotFoundError(business_id),
            conflicts={
                "PHOTO_LIMIT_EXCEEDED": lambda: PhotoLimitExceededError(
                    business_id, MAX_PHOTOS_PER_BUSINESS
                ),
            },
        )
        row = _first(response.data)
        if row is None:
            raise StoreUnavailableError("insert_media", "insert returned no data")
        return MediaAsset.model_validate(row)

    def delete_media(self, media_id: UUID) -> MediaAsset | None:
        response = self._execute(
            "delete_media",
            self.client.table("business_media").delete().eq("id", normalize_uuid(media_id)),
        )
        row = _first(response.data)
        return MediaAsset.model_validate(row) if row else None

    def update_media_order(self, media_id: UUID, display_order: int) -> MediaAsset | None:
        response = self._execute(
            "update_media_order",
            self.client.table("business_media")
            .update({"display_order": display_order})
            .eq("id", normalize_uuid(media_id)),
        )
        row = _first(response.data)
        return MediaAsset.model_validate(row) if row else None

    def logo_paths(self, business_ids: list[UUID]) -> dict[UUID, str]:
        if not business_ids:
            return {}
        response = self._execute(
            "logo_paths",
            self.client.table("business_media")
            .select("business_id, storage_path")
            .eq("media_type", MediaType.LOGO.value)
            .in_("business_id", [normalize_uuid(business_id) for business_id in business_ids]),
        )
        return {UUID(str(row["business_id"])): row["storage_path"] for row in response.data or []}

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    def get_verification_request(self, request_id: UUID) -> VerificationRequest | None:
        response = self._execute(
            "get_verification_request",
            self.client.table("verification_requests").select("*").eq("id", normalize_uuid(request_id)).limit(1),
        )
        row = _first(response.data)
        return VerificationRequest.model_validate(row) if row else None

    def latest_verification_request(self, business_id: UUID) -> VerificationRequest | None:
        response = self._execute(
            "latest_verification_request",
            self.client.table("verification_requests")
            .select("*")
            .eq("business_id", normalize_uuid(business_id))
            .order("created_at", desc=True)
            .limit(1),
        )
        row = _first(response.data)
        return VerificationRequest.model_validate(row) if row else None

    def list_verification_requests(
        self,
        status: VerificationStatus | None,
        limit: int,
        offset: int,
    ) -> tuple[list[VerificationRequest], int]:
        query = self.client.table("verification_requests").select("*", count="exact")
        if status is not None:
            query = query.eq("status", status.value)
        query = query.order("created_at").range(offset, offset + limit - 1)

        response = self._execute("list_verification_requests", query)
        return [VerificationRequest.model_validate(row) for row in response.data or []], response.count or 0

    def submit_verification_request(
        self,
        business_id: UUID,
        submitted_by: UUID,
        notes: str | None,
    ) -> VerificationRequest:
        """Insert a pending request and reset a rejected business, in one transaction."""
        response = self._execute(
            "submit_verification_request",
            self.client.rpc(
                "submit_verification_request",
                {
                    "p_business_id": normalize_uuid(business_id),
                    "p_submitted_by": normalize_uuid(submitted_by),
                    "p_notes": notes,
                },
            ),
            duplicates={
                "verification_requests_one_pending": lambda: VerificationAlreadyPendingError(business_id),
            },
            on_missing=lambda: BusinessNotFoundError(business_id),
            conflicts={
                "VERIFICATION_ALREADY_PENDING": lambda: VerificationAlreadyPendingError(business_id),
                "BUSINESS_ALREADY_VERIFIED": lambda: BusinessAlreadyVerifiedError(business_id),
                "BUSINESS_ARCHIVED": lambda: BusinessArchivedError(business_id),
            },
        )
        row = _first(response.data)
        if row is None:
            raise StoreUnavailableError("submit_verification_request", "function returned no row")
        return VerificationRequest.model_validate(row)

    def review_verification_request(
        self,
        request_id: UUID,
        reviewer_id: UUID,
        decision: VerificationStatus,
        notes: str | None,
    ) -> VerificationRequest:
        """
        Apply an admin decision to the request and its business atomically.

        The function locks the request row, so a second concurrent reviewer
        sees the first one's decision and gets VERIFICATION_ALREADY_REVIEWED.
        """
        response = self._execute(
            "review_verification_request",
            self.client.rpc(
                "review_verification_request",
                {
                    "p_request_id": normalize_uuid(request_id),
                    "p_reviewer_id": normalize_uuid(reviewer_id),
                    "p_decision": decision.value,
                    "p_notes": notes,
                },
            ),
            on_missing=lambda: VerificationRequestNotFoundError(request_id),
            conflicts={
                "VERIFICATION_ALREADY_REVIEWED": lambda: VerificationAlreadyReviewedError(request_id),
                "VERIFICATION_HAS_NO_DOCUMENTS": lambda: ConflictError(
                    message=f"Verification request {request_id} has no documents",
                    code="VERIFICATION_HAS_NO_DOCUMENTS",
                    suggestion="A request can only be approved once at least one document is attached",
                ),
            },
        )
        row = _first(response.data)
        if row is None:
            raise StoreUnavailableError("review_verification_request", "function returned no row")
        return VerificationRequest.model_validate(row)

    def list_documents(self, request_id: UUID) -> list[VerificationDocument]:
        response = self._execute(
            "list_documents",
            self.client.table("verification_documents")
            .select("*")
            .eq("verification_request_id", normalize_uuid(request_id))
            .order("created_at"),
        )
        return [VerificationDocument.model_validate(row) for row in response.data or []]

    def get_document(self, document_id: UUID) -> VerificationDocument | None:
        response = self._execute(
            "get_document",
            self.client.table("verification_documents").select("*").eq("id", normalize_uuid(document_id)).limit(1),
        )
        row = _first(response.data)
        return VerificationDocument.model_validate(row) if row else None

    def count_documents(self, request_id: UUID) -> int:
        response = self._execute(
            "count_documents",
            self.client.table("verification_documents")
            .select("id", count="exact")
            .eq("verification_request_id", normalize_uuid(request_id))
            .limit(1),
        )
        return response.count or 0

    def insert_document(self, data: dict[str, Any]) -> VerificationDocument:
        request_id = data.get("verification_request_id")
        response = self._execute(
            "insert_document",
            self.client.table("verification_documents").insert(self._payload(data)),
            table="verification_documents",
            on_missing=lambda: VerificationRequestNotFoundError(request_id),
            conflicts={
                "VERIFICATION_NOT_PENDING": lambda: VerificationNotPendingError(request_id),
                "DOCUMENT_LIMIT_EXCEEDED": lambda: DocumentLimitExceededError(
                    request_id, MAX_DOCUMENTS_PER_REQUEST
                ),
            },
        )
        row = _first(response.data)
        if row is None:
            raise StoreUnavailableError("insert_document", "insert returned no data")
        return VerificationDocument.model_validate(row)

    def delete_document(self, request_id: UUID, document_id: UUID) -> VerificationDocument | None:
        response = self._execute(
            "delete_document",
            self.client.table("verification_documents")
            .delete()
            .eq("id", normalize_uuid(document_id))
            .eq("verification_request_id", normalize_uuid(request_id)),
            conflicts={
                "VERIFICATION_NOT_PENDING": lambda: VerificationNotPendingError(request_id),
            },
        )
        row = _first(response.data)
        return VerificationDocument.model_validate(row) if row else None

# =============================================================================
# lib/store.py - Persistence & Storage Interfaces
# =============================================================================
# Services depend on these protocols, never on a concrete client:
# - MarketplaceStore: relational + spatial persistence (SupabaseStore in prod)
# - StorageGateway: signed-URL object storage (StorageService in prod)
#
# Every method returns typed records from core.models. Failures surface as
# app.exceptions types:
# - DuplicateRowError / ConflictError subclasses for constraint violations
# - StoreUnavailableError / StorageGatewayError for transport failures
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Protocol
from uuid import UUID

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


# =============================================================================
# Query Objects
# =============================================================================

@dataclass(frozen=True)
class SpatialQuery:
    """
    Parameters of one spatial search, already validated and clamped.

    Visibility:
        visible_statuses=None means no status restriction (admin scope).
        Otherwise a row is visible when its status is in visible_statuses
        or its owner is visible_owner_id. `status` then narrows further.
    """

    limit: int
    offset: int = 0
    latitude: float | None = None
    longitude: float | None = None
    radius_km: float | None = None
    query: str | None = None
    city: str | None = None
    category: str | None = None
    visible_statuses: tuple[BusinessStatus, ...] | None = (BusinessStatus.ACTIVE,)
    visible_owner_id: UUID | None = None
    status: BusinessStatus | None = None
    verification_status: VerificationStatus | None = None

    @property
    def has_center(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass
class SpatialHit:
    business: Business
    distance_km: float | None = None


@dataclass
class SpatialResult:
    """Hits in rank order. `total` is None when the store could not count."""

    hits: list[SpatialHit] = field(default_factory=list)
    total: int | None = None


@dataclass(frozen=True)
class SignedUpload:
    url: str
    path: str
    token: str | None = None


# =============================================================================
# Protocols
# =============================================================================

class MarketplaceStore(Protocol):
    """Persistence operations used by the services."""

    # Health
    def ping(self) -> None: ...

    # Businesses
    def get_business(self, business_id: UUID) -> Business | None: ...
    def list_businesses_by_owner(self, owner_id: UUID) -> list[Business]: ...
    def insert_business(self, data: dict[str, Any]) -> Business: ...
    def update_business(self, business_id: UUID, changes: dict[str, Any]) -> Business | None: ...
    def transition_business_status(
        self,
        business_id: UUID,
        allowed_from: list[BusinessStatus],
        changes: dict[str, Any],
    ) -> Business | None: ...
    def search_businesses(self, query: SpatialQuery) -> SpatialResult: ...
    def business_stats(self) -> BusinessStats: ...
    def get_categories(self, business_id: UUID) -> list[str]: ...
    def replace_categories(self, business_id: UUID, categories: list[str]) -> list[str]: ...
    def get_hours(self, business_id: UUID) -> list[BusinessHoursEntry]: ...
    def replace_hours(self, business_id: UUID, entries: list[BusinessHoursEntry]) -> list[BusinessHoursEntry]: ...

    # Ratings
    def upsert_rating(self, business_id: UUID, user_id: UUID, rating: int, review_text: str | None) -> Rating: ...
    def get_rating(self, business_id: UUID, user_id: UUID) -> Rating | None: ...
    def delete_rating(self, business_id: UUID, user_id: UUID) -> bool: ...
    def rating_summary(self, business_id: UUID) -> RatingSummary: ...
    def rating_summaries(self, business_ids: list[UUID]) -> dict[UUID, RatingBrief]: ...
    def list_ratings(self, business_id: UUID, limit: int, offset: int) -> tuple[list[Rating], int]: ...

    # Favorites
    def insert_favorite(self, user_id: UUID, business_id: UUID) -> Favorite: ...
    def get_favorite(self, user_id: UUID, business_id: UUID) -> Favorite | None: ...
    def delete_favorite(self, user_id: UUID, business_id: UUID) -> bool: ...
    def favorited_ids(self, user_id: UUID, business_ids: list[UUID]) -> set[UUID]: ...
    def list_favorite_businesses(self, user_id: UUID, limit: int, offset: int) -> tuple[list[Business], int]: ...
    def count_favorites(self, business_id: UUID) -> int: ...

    # Media
    def list_media(self, business_id: UUID) -> list[MediaAsset]: ...
    def get_media(self, media_id: UUID) -> MediaAsset | None: ...
    def count_media(self, business_id: UUID, media_type: MediaType) -> int: ...
    def insert_media(self, data: dict[str, Any]) -> MediaAsset: ...
    def delete_media(self, media_id: UUID) -> MediaAsset | None: ...
    def update_media_order(self, media_id: UUID, display_order: int) -> MediaAsset | None: ...
    def logo_paths(self, business_ids: list[UUID]) -> dict[UUID, str]: ...

    # Verification
    def get_verification_request(self, request_id: UUID) -> VerificationRequest | None: ...
    def latest_verification_request(self, business_id: UUID) -> VerificationRequest | None: ...
    def list_verification_requests(
        self,
        status: VerificationStatus | None,
        limit: int,
        offset: int,
    ) -> tuple[list[VerificationRequest], int]: ...
    def submit_verification_request(
        self,
        business_id: UUID,
        submitted_by: UUID,
        notes: str | None,
    ) -> VerificationRequest: ...
    def review_verification_request(
        self,
        request_id: UUID,
        reviewer_id: UUID,
        decision: VerificationStatus,
        notes: str | None,
    ) -> VerificationRequest: ...
    def list_documents(self, request_id: UUID) -> list[VerificationDocument]: ...
    def get_document(self, document_id: UUID) -> VerificationDocument | None: ...
    def count_documents(self, request_id: UUID) -> int: ...
    def insert_document(self, data: dict[str, Any]) -> VerificationDocument: ...
    def delete_document(self, request_id: UUID, document_id: UUID) -> VerificationDocument | None: ...


class StorageGateway(Protocol):
    """Signed-URL object storage keyed by opaque paths."""

    def ping(self) -> None: ...
    def create_signed_upload_url(self, path: str, content_type: str, ttl_seconds: int) -> SignedUpload: ...
    def create_signed_download_url(self, path: str, ttl_seconds: int) -> str: ...
    def delete(self, path: str) -> None: ...

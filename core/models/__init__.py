# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - business.py: Business record, lifecycle enums, Viewer, create/update payloads
# - media.py: Logo/photo records and upload tickets
# - rating.py: Ratings and rating summaries
# - favorite.py: Favorite pairs
# - verification.py: Verification requests, documents and review decisions
# - search.py: Search filters, enriched results and detail payloads
#
# Rows from the store are validated into these models at the store boundary.
# =============================================================================

# -----------------------------------------------------------------------------
# Business Models
# -----------------------------------------------------------------------------
from .business import (
    DAY_ORDER,
    Business,
    BusinessCreate,
    BusinessHoursEntry,
    BusinessStats,
    BusinessStatus,
    BusinessUpdate,
    DayOfWeek,
    UserRole,
    VerificationStatus,
    Viewer,
)

# -----------------------------------------------------------------------------
# Media / Rating / Favorite Models
# -----------------------------------------------------------------------------
from .media import (
    MediaAsset,
    MediaOrderItem,
    MediaSaveRequest,
    MediaType,
    MediaUploadRequest,
    MediaWithUrl,
    UploadTicket,
)
from .rating import Rating, RatingBrief, RatingInput, RatingSummary
from .favorite import Favorite

# -----------------------------------------------------------------------------
# Verification Models
# -----------------------------------------------------------------------------
from .verification import (
    DocumentCreate,
    DocumentType,
    DocumentUploadRequest,
    ReviewDecision,
    VerificationDocument,
    VerificationDocumentWithUrl,
    VerificationRequest,
    VerificationRequestDetail,
    VerificationSubmit,
)

# -----------------------------------------------------------------------------
# Search Models
# -----------------------------------------------------------------------------
from .search import (
    BusinessDetail,
    EnrichedBusiness,
    Page,
    Pagination,
    SearchFilters,
    SearchPage,
)

__all__ = [
    # Business
    "DAY_ORDER",
    "Business",
    "BusinessCreate",
    "BusinessHoursEntry",
    "BusinessStats",
    "BusinessStatus",
    "BusinessUpdate",
    "DayOfWeek",
    "UserRole",
    "VerificationStatus",
    "Viewer",
    # Media
    "MediaAsset",
    "MediaOrderItem",
    "MediaSaveRequest",
    "MediaType",
    "MediaUploadRequest",
    "MediaWithUrl",
    "UploadTicket",
    # Rating / Favorite
    "Rating",
    "RatingBrief",
    "RatingInput",
    "RatingSummary",
    "Favorite",
    # Verification
    "DocumentCreate",
    "DocumentType",
    "DocumentUploadRequest",
    "ReviewDecision",
    "VerificationDocument",
    "VerificationDocumentWithUrl",
    "VerificationRequest",
    "VerificationRequestDetail",
    "VerificationSubmit",
    # Search
    "BusinessDetail",
    "EnrichedBusiness",
    "Page",
    "Pagination",
    "SearchFilters",
    "SearchPage",
]

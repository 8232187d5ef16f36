# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .storage_service import StorageService
from .business_service import BusinessService
from .rating_service import RatingService
from .favorite_service import FavoriteService
from .media_service import MediaService
from .search_service import SearchService
from .verification_service import VerificationService

__all__ = [
    "StorageService",
    "BusinessService",
    "RatingService",
    "FavoriteService",
    "MediaService",
    "SearchService",
    "VerificationService",
]

# =============================================================================
# lib/ - Persistence Adapters and Utilities
# =============================================================================
# This package contains:
# - store.py: Store and storage gateway interfaces plus query/result types
# - supabase_client.py: Supabase (PostgREST + PostGIS) implementation of the store
# - utils.py: Shared helpers (UUID normalization, clamping, coordinates)
#
# Services depend on the interfaces in store.py, never on Supabase directly.
# =============================================================================

from lib.store import (
    MarketplaceStore,
    SignedUpload,
    SpatialHit,
    SpatialQuery,
    SpatialResult,
    StorageGateway,
)
from lib.supabase_client import SupabaseStore, create_supabase_client
from lib.utils import is_valid_coordinate_pair, normalize_uuid

__all__ = [
    # Interfaces
    "MarketplaceStore",
    "StorageGateway",
    "SpatialQuery",
    "SpatialHit",
    "SpatialResult",
    "SignedUpload",
    # Supabase
    "SupabaseStore",
    "create_supabase_client",
    # Utils
    "is_valid_coordinate_pair",
    "normalize_uuid",
]

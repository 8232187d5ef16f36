# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application: id normalization, coordinate
# checks and the clamping rules shared by every paginated/radius query.
# =============================================================================

import math
import mimetypes
import os
from typing import Any
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Example:
        business_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        business_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Coordinates
# =============================================================================

def is_valid_coordinate_pair(latitude: Any, longitude: Any) -> bool:
    """True when both values are finite numbers inside the WGS84 ranges."""
    for value in (latitude, longitude):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if not math.isfinite(value):
            return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


# =============================================================================
# Clamping
# =============================================================================

def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def clamp_page(page: int | None) -> int:
    """Pages are 1-based; anything below 1 becomes 1."""
    if page is None or page < 1:
        return 1
    return int(page)


def clamp_limit(limit: int | None, default: int, maximum: int) -> int:
    """
    Resolve a page size.

    None -> default, otherwise clamped to [1, maximum].
    """
    if limit is None:
        return default
    return int(clamp(limit, 1, maximum))


def clamp_radius_km(radius_km: float | None, default: float, lower: float, upper: float) -> float:
    """None -> default, otherwise clamped to [lower, upper]."""
    if radius_km is None:
        return default
    return clamp(float(radius_km), lower, upper)


def total_pages(total: int | None, limit: int) -> int | None:
    if total is None:
        return None
    return math.ceil(total / limit) if total else 0


# =============================================================================
# Storage Paths
# =============================================================================

def file_extension(file_name: str, content_type: str | None = None) -> str:
    """
    Lower-case extension (with dot) for a storage key.

    Falls back to the MIME type when the file name has none. Only
    alphanumeric extensions are kept so the key stays URL-safe.
    """
    ext = os.path.splitext(file_name)[1].lower()
    if not ext and content_type:
        ext = mimetypes.guess_extension(content_type) or ""
    if ext and not ext[1:].isalnum():
        return ""
    return ext

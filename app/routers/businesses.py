# =============================================================================
# app/routers/businesses.py - Public Discovery Endpoints
# =============================================================================
# Search, nearby, business detail and its sub-resources. Authentication is optional: signed-in
# viewers additionally get their favorite/rating state and see their own
# non-active businesses.
#
# Endpoints are plain `def`: the services block on Supabase calls, so
# FastAPI runs them in its threadpool.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from app.dependencies import (
    BusinessServiceDep,
    MediaServiceDep,
    OptionalViewerDep,
    RatingServiceDep,
    SearchServiceDep,
)
from core.models.business import BusinessHoursEntry
from core.models.media import MediaWithUrl
from core.models.rating import Rating, RatingSummary
from core.models.search import BusinessDetail, Page, SearchFilters, SearchPage

router = APIRouter()

BusinessIdPath = Annotated[UUID, Path(description="Business UUID")]


@router.get("/search", response_model=SearchPage)
def search_businesses(
    search: SearchServiceDep,
    viewer: OptionalViewerDep,
    query: Annotated[str | None, Query(description="Matches name or description")] = None,
    latitude: Annotated[float | None, Query(description="Center latitude")] = None,
    longitude: Annotated[float | None, Query(description="Center longitude")] = None,
    radius_km: Annotated[float | None, Query(description="Radius in km (clamped to 1-500, default 50)")] = None,
    city: Annotated[str | None, Query()] = None,
    category: Annotated[str | None, Query()] = None,
    page: Annotated[int | None, Query(description="1-based page")] = None,
    limit: Annotated[int | None, Query(description="Page size (clamped to 1-100, default 20)")] = None,
):
    """
    Search active businesses.

    With a center point, results are ordered by distance and carry
    `distance_km`; without one they are ordered newest first.
    """
    filters = SearchFilters(
        query=query,
        latitude=latitude,
        longitude=longitude,
        radius_km=radius_km,
        city=city,
        category=category,
        page=page,
        limit=limit,
    )
    return search.search(filters, viewer)


@router.get("/nearby", response_model=SearchPage)
def nearby_businesses(
    search: SearchServiceDep,
    viewer: OptionalViewerDep,
    lat: Annotated[float | None, Query(description="Center latitude")] = None,
    lng: Annotated[float | None, Query(description="Center longitude")] = None,
    radius: Annotated[float | None, Query(description="Radius in meters (default 10000)")] = None,
    category: Annotated[str | None, Query()] = None,
    page: Annotated[int | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
):
    """Businesses around a point, radius in meters."""
    return search.nearby(lat, lng, radius, viewer=viewer, page=page, limit=limit, category=category)


@router.get("/{business_id}", response_model=BusinessDetail)
def get_business(
    business_id: BusinessIdPath,
    search: SearchServiceDep,
    viewer: OptionalViewerDep,
):
    """
    Business detail: media, hours, categories, rating summary and favorite count.

    Signed-in viewers also get `is_favorited` and `viewer_rating`.
    """
    return search.get_business_detail(business_id, viewer)


@router.get("/{business_id}/media", response_model=list[MediaWithUrl])
def list_business_media(
    business_id: BusinessIdPath,
    media: MediaServiceDep,
    viewer: OptionalViewerDep,
):
    """Logo and photos with freshly signed URLs."""
    return media.list_media(business_id, viewer)


@router.get("/{business_id}/categories", response_model=list[str])
def list_business_categories(
    business_id: BusinessIdPath,
    businesses: BusinessServiceDep,
    viewer: OptionalViewerDep,
):
    """Category names, alphabetical."""
    return businesses.get_categories(business_id, viewer)


@router.get("/{business_id}/hours", response_model=list[BusinessHoursEntry])
def list_business_hours(
    business_id: BusinessIdPath,
    businesses: BusinessServiceDep,
    viewer: OptionalViewerDep,
):
    """Opening hours, Monday first."""
    return businesses.get_hours(business_id, viewer)


@router.get("/{business_id}/ratings", response_model=Page[Rating])
def list_business_ratings(
    business_id: BusinessIdPath,
    ratings: RatingServiceDep,
    viewer: OptionalViewerDep,
    page: Annotated[int | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
):
    """Ratings, newest first."""
    return ratings.list_for_business(business_id, viewer, page=page, limit=limit)


@router.get("/{business_id}/ratings/summary", response_model=RatingSummary)
def get_rating_summary(
    business_id: BusinessIdPath,
    ratings: RatingServiceDep,
    viewer: OptionalViewerDep,
):
    """Average, count and 1-5 histogram."""
    return ratings.get_summary(business_id, viewer)

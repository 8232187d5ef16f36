# =============================================================================
# app/routers/me.py - Current User Endpoints
# =============================================================================
# Favorites and ratings of the signed-in user.
# All endpoints require authentication.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from app.auth import AuthUser, get_current_user
from app.dependencies import FavoriteServiceDep, RatingServiceDep, ViewerDep
from core.models.business import Business
from core.models.favorite import Favorite
from core.models.rating import Rating, RatingInput
from core.models.search import Page

router = APIRouter()

BusinessIdPath = Annotated[UUID, Path(description="Business UUID")]


@router.get("", response_model=AuthUser)
def get_me(user: AuthUser = Depends(get_current_user)):
    """Profile claims from the verified token."""
    return user


# =============================================================================
# Favorites
# =============================================================================

@router.get("/favorites", response_model=Page[Business])
def list_favorites(
    favorites: FavoriteServiceDep,
    viewer: ViewerDep,
    page: Annotated[int | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
):
    """
    Favorited businesses that are currently active.

    Favorites of businesses that are no longer active are kept and come
    back once the business is active again.
    """
    return favorites.list_for_user(viewer, page=page, limit=limit)


@router.post("/favorites/{business_id}", response_model=Favorite, status_code=status.HTTP_201_CREATED)
def add_favorite(business_id: BusinessIdPath, favorites: FavoriteServiceDep, viewer: ViewerDep):
    """Favorite a business. Repeating the call returns the existing favorite."""
    return favorites.add(viewer, business_id)


@router.delete("/favorites/{business_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_favorite(business_id: BusinessIdPath, favorites: FavoriteServiceDep, viewer: ViewerDep):
    """Unfavorite a business. Succeeds even if it wasn't favorited."""
    favorites.remove(viewer, business_id)


# =============================================================================
# Ratings
# =============================================================================

@router.put("/ratings/{business_id}", response_model=Rating)
def upsert_rating(
    business_id: BusinessIdPath,
    body: RatingInput,
    ratings: RatingServiceDep,
    viewer: ViewerDep,
):
    """Rate a business 1-5. Rating again replaces the previous rating."""
    return ratings.upsert(business_id, viewer, body.rating, body.review_text)


@router.get("/ratings/{business_id}", response_model=Rating | None)
def get_my_rating(business_id: BusinessIdPath, ratings: RatingServiceDep, viewer: ViewerDep):
    return ratings.get_viewer_rating(business_id, viewer)


@router.delete("/ratings/{business_id}")
def delete_rating(business_id: BusinessIdPath, ratings: RatingServiceDep, viewer: ViewerDep):
    return {"deleted": ratings.delete(business_id, viewer)}

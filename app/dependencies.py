# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# The lifespan handler in main.py builds one ServiceContainer and stores it
# on app.state. Tests replace it through app.dependency_overrides[get_services].
# =============================================================================

from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Request

from app.auth.dependencies import get_viewer, get_viewer_optional
from app.config import Settings
from core.models.business import Viewer
from core.services.business_service import BusinessService
from core.services.favorite_service import FavoriteService
from core.services.media_service import MediaService
from core.services.rating_service import RatingService
from core.services.search_service import SearchService
from core.services.verification_service import VerificationService
from lib.store import MarketplaceStore, StorageGateway


@dataclass
class ServiceContainer:
    """Every service, wired to one store and one storage gateway."""

    store: MarketplaceStore
    storage: StorageGateway
    settings: Settings
    businesses: BusinessService
    ratings: RatingService
    favorites: FavoriteService
    media: MediaService
    search: SearchService
    verification: VerificationService


def build_services(store: MarketplaceStore, storage: StorageGateway, settings: Settings) -> ServiceContainer:
    """Wire the service graph. Leaves first, pipeline last."""
    ratings = RatingService(store, settings)
    favorites = FavoriteService(store, settings)
    media = MediaService(store, storage, settings)
    return ServiceContainer(
        store=store,
        storage=storage,
        settings=settings,
        businesses=BusinessService(store, settings),
        ratings=ratings,
        favorites=favorites,
        media=media,
        search=SearchService(store, ratings, favorites, media, settings),
        verification=VerificationService(store, storage, settings),
    )


def get_services(request: Request) -> ServiceContainer:
    """The container built at startup."""
    return request.app.state.services


ServicesDep = Annotated[ServiceContainer, Depends(get_services)]


def get_business_service(services: ServicesDep) -> BusinessService:
    return services.businesses


def get_rating_service(services: ServicesDep) -> RatingService:
    return services.ratings


def get_favorite_service(services: ServicesDep) -> FavoriteService:
    return services.favorites


def get_media_service(services: ServicesDep) -> MediaService:
    return services.media


def get_search_service(services: ServicesDep) -> SearchService:
    return services.search


def get_verification_service(services: ServicesDep) -> VerificationService:
    return services.verification


# Type aliases for dependency injection
BusinessServiceDep = Annotated[BusinessService, Depends(get_business_service)]
RatingServiceDep = Annotated[RatingService, Depends(get_rating_service)]
FavoriteServiceDep = Annotated[FavoriteService, Depends(get_favorite_service)]
MediaServiceDep = Annotated[MediaService, Depends(get_media_service)]
SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]
VerificationServiceDep = Annotated[VerificationService, Depends(get_verification_service)]

ViewerDep = Annotated[Viewer, Depends(get_viewer)]
OptionalViewerDep = Annotated[Optional[Viewer], Depends(get_viewer_optional)]

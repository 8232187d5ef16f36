# =============================================================================
# core/services/media_service.py - Media Resolver
# =============================================================================
# Logo and photo records for a business, and the signed URLs around them.
#
# Upload flow:
#   1. request_upload() -> signed upload URL + storage path (nothing persisted)
#   2. client PUTs the bytes to the URL
#   3. save_record() -> media row, enforcing one logo and the photo cap
#
# The database row is the source of truth for "does this media exist";
# storage objects are cleaned up best-effort after the row is gone.
# =============================================================================

import logging
from uuid import UUID, uuid4

from app.config import MAX_PHOTOS_PER_BUSINESS, Settings
from app.exceptions import (
    InvalidInputError,
    LogoAlreadyExistsError,
    MediaNotFoundError,
    PhotoLimitExceededError,
    StorageGatewayError,
)
from core.models.business import Viewer
from core.models.media import (
    MediaAsset,
    MediaOrderItem,
    MediaSaveRequest,
    MediaType,
    MediaWithUrl,
    UploadTicket,
)
from core.services.business_service import get_managed_business, get_visible_business
from lib.store import MarketplaceStore, StorageGateway
from lib.utils import file_extension, normalize_uuid

logger = logging.getLogger(__name__)


def media_prefix(business_id: UUID, media_type: MediaType) -> str:
    return f"businesses/{normalize_uuid(business_id)}/{media_type.value}/"


class MediaService:
    """Service for business media."""

    def __init__(self, store: MarketplaceStore, storage: StorageGateway, settings: Settings):
        self.store = store
        self.storage = storage
        self.settings = settings

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    def request_upload(
        self,
        business_id: UUID,
        viewer: Viewer,
        file_name: str,
        content_type: str,
        media_type: MediaType,
        file_size_bytes: int | None = None,
    ) -> UploadTicket:
        """
        Issue a short-lived signed upload URL under the business's namespace.

        Raises:
            InvalidInputError: If the MIME type or size is not allowed
        """
        get_managed_business(self.store, business_id, viewer, "upload media")
        self._check_image(content_type, file_size_bytes)

        path = f"{media_prefix(business_id, media_type)}{uuid4().hex}{file_extension(file_name, content_type)}"
        signed = self.storage.create_signed_upload_url(path, content_type, self.settings.UPLOAD_URL_TTL_SECONDS)

        logger.info(f"Issued {media_type.value} upload for business {business_id}: {signed.path}")
        return UploadTicket(
            upload_url=signed.url,
            storage_path=signed.path,
            token=signed.token,
            expires_in=self.settings.UPLOAD_URL_TTL_SECONDS,
        )

    def _check_image(self, content_type: str | None, file_size_bytes: int | None) -> None:
        allowed = self.settings.allowed_image_types_list
        if content_type is not None and content_type.lower() not in allowed:
            raise InvalidInputError(
                f"Unsupported image type: {content_type}",
                field="content_type",
                suggestion=f"Use one of: {', '.join(allowed)}",
            )
        if file_size_bytes is not None and file_size_bytes > self.settings.max_image_size_bytes:
            raise InvalidInputError(
                f"Image is larger than {self.settings.MAX_IMAGE_SIZE_MB} MB",
                field="file_size_bytes",
                suggestion="Compress or resize the image before uploading",
            )

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def save_record(self, business_id: UUID, viewer: Viewer, payload: MediaSaveRequest) -> MediaAsset:
        """
        Persist a media row after the upload completed.

        A logo never silently replaces the current one: delete it first.

        Raises:
            LogoAlreadyExistsError: If the business already has a logo
            PhotoLimitExceededError: If the photo cap is reached
            DuplicateRowError: If the storage path is already recorded
        """
        get_managed_business(self.store, business_id, viewer, "save media")

        if not payload.storage_path.startswith(media_prefix(business_id, payload.media_type)):
            raise InvalidInputError(
                "Storage path does not belong to this business",
                field="storage_path",
                suggestion="Use the storage_path returned by the upload-url endpoint",
            )
        self._check_image(payload.mime_type, payload.file_size_bytes)

        existing = self.store.count_media(business_id, payload.media_type)
        if payload.media_type == MediaType.LOGO and existing > 0:
            raise LogoAlreadyExistsError(business_id)
        if payload.media_type == MediaType.PHOTO and existing >= MAX_PHOTOS_PER_BUSINESS:
            raise PhotoLimitExceededError(business_id, MAX_PHOTOS_PER_BUSINESS)

        data = payload.model_dump()
        data["business_id"] = business_id
        media = self.store.insert_media(data)

        logger.info(f"Saved {media.media_type.value} {media.id} for business {business_id}")
        return media

    def list_media(self, business_id: UUID, viewer: Viewer | None) -> list[MediaWithUrl]:
        get_visible_business(self.store, business_id, viewer)
        return self.with_urls(self.store.list_media(business_id))

    def reorder(self, business_id: UUID, viewer: Viewer, items: list[MediaOrderItem]) -> list[MediaAsset]:
        get_managed_business(self.store, business_id, viewer, "reorder media")

        owned = {media.id for media in self.store.list_media(business_id)}
        for item in items:
            if item.media_id not in owned:
                raise MediaNotFoundError(item.media_id)

        for item in items:
            self.store.update_media_order(item.media_id, item.display_order)
        return self.store.list_media(business_id)

    def delete(self, media_id: UUID, viewer: Viewer, business_id: UUID | None = None) -> MediaAsset:
        """
        Delete the row, then the object.

        A failed object delete is logged and left for cleanup; the row is
        already gone so the media no longer exists as far as clients can tell.
        """
        media = self.store.get_media(media_id)
        if media is None or (business_id is not None and media.business_id != business_id):
            raise MediaNotFoundError(media_id)
        get_managed_business(self.store, media.business_id, viewer, "delete media")

        deleted = self.store.delete_media(media_id)
        if deleted is None:
            raise MediaNotFoundError(media_id)
        logger.info(f"Deleted {deleted.media_type.value} {media_id} of business {deleted.business_id}")

        try:
            self.storage.delete(deleted.storage_path)
        except StorageGatewayError as e:
            logger.warning(f"Orphaned storage object {deleted.storage_path}: {e.message}")

        return deleted

    # -------------------------------------------------------------------------
    # URLs
    # -------------------------------------------------------------------------

    def resolve_download_url(self, storage_path: str) -> str:
        """A fresh signed read URL. Raises StorageGatewayError on failure."""
        return self.storage.create_signed_download_url(storage_path, self.settings.DOWNLOAD_URL_TTL_SECONDS)

    def logo_paths(self, business_ids: list[UUID]) -> dict[UUID, str]:
        return self.store.logo_paths(business_ids)

    def with_urls(self, assets: list[MediaAsset]) -> list[MediaWithUrl]:
        """Attach signed URLs; an asset whose URL can't be signed gets url=None."""
        results = []
        for asset in assets:
            try:
                url = self.resolve_download_url(asset.storage_path)
            except StorageGatewayError as e:
                logger.warning(f"No URL for media {asset.id}: {e.message}")
                url = None
            results.append(MediaWithUrl(**asset.model_dump(), url=url))
        return results

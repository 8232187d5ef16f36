# =============================================================================
# core/models/media.py - Media Schemas
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class MediaType(str, Enum):
    """
    Kind of business image.

    - logo: at most one per business
    - photo: gallery image, capped per business
    """
    LOGO = "logo"
    PHOTO = "photo"


class MediaAsset(BaseModel):
    """A media row as stored. `storage_path` is the key into the bucket."""

    id: UUID
    business_id: UUID
    media_type: MediaType
    storage_path: str
    file_name: str | None = None
    file_size_bytes: int | None = None
    mime_type: str | None = None
    display_order: int = 0
    created_at: datetime | None = None


class MediaWithUrl(MediaAsset):
    """A media asset with a freshly signed download URL (None when signing failed)."""

    url: str | None = None


class UploadTicket(BaseModel):
    """
    Result of requesting an upload.

    The client PUTs the bytes to `upload_url`, then saves the record with
    `storage_path`. Nothing is persisted when the ticket is issued.
    """

    upload_url: str
    storage_path: str
    token: str | None = None
    expires_in: int


class MediaUploadRequest(BaseModel):
    """Body for POST .../media/upload-url."""

    file_name: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., description="MIME type, e.g. image/png")
    media_type: MediaType
    file_size_bytes: int | None = Field(default=None, ge=1)


class MediaSaveRequest(BaseModel):
    """Body for POST .../media once the upload finished."""

    media_type: MediaType
    storage_path: str = Field(..., min_length=1)
    file_name: str | None = None
    file_size_bytes: int | None = Field(default=None, ge=1)
    mime_type: str | None = None
    display_order: int = Field(default=0, ge=0)


class MediaOrderItem(BaseModel):
    media_id: UUID
    display_order: int = Field(..., ge=0)

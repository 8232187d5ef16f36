# =============================================================================
# app/routers/supplier.py - Supplier Endpoints
# =============================================================================
# Business registration and management for suppliers (and admins acting on
# their behalf): CRUD, publish/archive, categories, hours, media and the
# supplier side of verification.
#
# Ownership is checked by the services; this router only requires the role.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, Field

from app.auth import require_role
from app.dependencies import (
    BusinessServiceDep,
    MediaServiceDep,
    VerificationServiceDep,
    ViewerDep,
)
from core.models.business import Business, BusinessCreate, BusinessHoursEntry, BusinessUpdate, UserRole
from core.models.media import MediaAsset, MediaOrderItem, MediaSaveRequest, MediaUploadRequest, UploadTicket
from core.models.verification import (
    DocumentCreate,
    DocumentUploadRequest,
    VerificationDocument,
    VerificationRequest,
    VerificationRequestDetail,
    VerificationSubmit,
)

router = APIRouter(dependencies=[Depends(require_role(UserRole.SUPPLIER, UserRole.ADMIN))])

BusinessIdPath = Annotated[UUID, Path(description="Business UUID")]
RequestIdPath = Annotated[UUID, Path(description="Verification request UUID")]


# =============================================================================
# Request Models
# =============================================================================

class CategoriesRequest(BaseModel):
    categories: list[str] = Field(default_factory=list, max_length=20)


class HoursRequest(BaseModel):
    hours: list[BusinessHoursEntry] = Field(default_factory=list, max_length=7)


class MediaOrderRequest(BaseModel):
    items: list[MediaOrderItem]


# =============================================================================
# Businesses
# =============================================================================

@router.get("/businesses", response_model=list[Business])
def list_my_businesses(businesses: BusinessServiceDep, viewer: ViewerDep):
    """Businesses owned by the caller, newest first, in every status."""
    return businesses.list_owned(viewer)


@router.post("/businesses", response_model=Business, status_code=status.HTTP_201_CREATED)
def create_business(body: BusinessCreate, businesses: BusinessServiceDep, viewer: ViewerDep):
    """Register a business. It starts as a draft."""
    return businesses.create(viewer, body)


@router.get("/businesses/{business_id}", response_model=Business)
def get_my_business(business_id: BusinessIdPath, businesses: BusinessServiceDep, viewer: ViewerDep):
    return businesses.get(business_id, viewer)


@router.patch("/businesses/{business_id}", response_model=Business)
def update_business(
    business_id: BusinessIdPath,
    body: BusinessUpdate,
    businesses: BusinessServiceDep,
    viewer: ViewerDep,
):
    """Partial update. Send only the fields that change."""
    return businesses.update(business_id, viewer, body)


@router.post("/businesses/{business_id}/publish", response_model=Business)
def publish_business(business_id: BusinessIdPath, businesses: BusinessServiceDep, viewer: ViewerDep):
    """Submit a draft for admin approval (draft -> pending)."""
    return businesses.publish(business_id, viewer)


@router.delete("/businesses/{business_id}", response_model=Business)
def archive_business(business_id: BusinessIdPath, businesses: BusinessServiceDep, viewer: ViewerDep):
    """Archive (soft-delete) a business. This cannot be undone."""
    return businesses.archive(business_id, viewer)


@router.get("/businesses/{business_id}/categories", response_model=list[str])
def get_categories(business_id: BusinessIdPath, businesses: BusinessServiceDep, viewer: ViewerDep):
    return businesses.get_categories(business_id, viewer)


@router.get("/businesses/{business_id}/hours", response_model=list[BusinessHoursEntry])
def get_hours(business_id: BusinessIdPath, businesses: BusinessServiceDep, viewer: ViewerDep):
    return businesses.get_hours(business_id, viewer)


@router.put("/businesses/{business_id}/categories", response_model=list[str])
def replace_categories(
    business_id: BusinessIdPath,
    body: CategoriesRequest,
    businesses: BusinessServiceDep,
    viewer: ViewerDep,
):
    return businesses.replace_categories(business_id, viewer, body.categories)


@router.put("/businesses/{business_id}/hours", response_model=list[BusinessHoursEntry])
def replace_hours(
    business_id: BusinessIdPath,
    body: HoursRequest,
    businesses: BusinessServiceDep,
    viewer: ViewerDep,
):
    """Replace the weekly opening hours (at most one entry per day)."""
    return businesses.replace_hours(business_id, viewer, body.hours)


# =============================================================================
# Media
# =============================================================================

@router.post("/businesses/{business_id}/media/upload-url", response_model=UploadTicket)
def request_media_upload(
    business_id: BusinessIdPath,
    body: MediaUploadRequest,
    media: MediaServiceDep,
    viewer: ViewerDep,
):
    """
    Get a signed URL to upload a logo or photo.

    PUT the file to `upload_url`, then POST the returned `storage_path`
    to /media to save the record.
    """
    return media.request_upload(
        business_id,
        viewer,
        file_name=body.file_name,
        content_type=body.content_type,
        media_type=body.media_type,
        file_size_bytes=body.file_size_bytes,
    )


@router.post("/businesses/{business_id}/media", response_model=MediaAsset, status_code=status.HTTP_201_CREATED)
def save_media(
    business_id: BusinessIdPath,
    body: MediaSaveRequest,
    media: MediaServiceDep,
    viewer: ViewerDep,
):
    """Save an uploaded logo or photo. One logo and up to 3 photos per business."""
    return media.save_record(business_id, viewer, body)


@router.put("/businesses/{business_id}/media/order", response_model=list[MediaAsset])
def reorder_media(
    business_id: BusinessIdPath,
    body: MediaOrderRequest,
    media: MediaServiceDep,
    viewer: ViewerDep,
):
    return media.reorder(business_id, viewer, body.items)


@router.delete("/businesses/{business_id}/media/{media_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_media(
    business_id: BusinessIdPath,
    media_id: Annotated[UUID, Path(description="Media UUID")],
    media: MediaServiceDep,
    viewer: ViewerDep,
):
    media.delete(media_id, viewer, business_id=business_id)


# =============================================================================
# Verification
# =============================================================================

@router.post(
    "/businesses/{business_id}/verification",
    response_model=VerificationRequest,
    status_code=status.HTTP_201_CREATED,
)
def submit_verification(
    business_id: BusinessIdPath,
    body: VerificationSubmit,
    verification: VerificationServiceDep,
    viewer: ViewerDep,
):
    """Open a verification request. Attach documents while it is pending."""
    return verification.submit(business_id, viewer, body.notes)


@router.get("/businesses/{business_id}/verification", response_model=VerificationRequest | None)
def get_latest_verification(
    business_id: BusinessIdPath,
    verification: VerificationServiceDep,
    viewer: ViewerDep,
):
    return verification.get_latest(business_id, viewer)


@router.get("/verification/{request_id}", response_model=VerificationRequestDetail)
def get_verification_request(
    request_id: RequestIdPath,
    verification: VerificationServiceDep,
    viewer: ViewerDep,
):
    return verification.get_request(request_id, viewer)


@router.post("/verification/{request_id}/documents/upload-url", response_model=UploadTicket)
def request_document_upload(
    request_id: RequestIdPath,
    body: DocumentUploadRequest,
    verification: VerificationServiceDep,
    viewer: ViewerDep,
):
    return verification.request_document_upload(
        request_id,
        viewer,
        file_name=body.file_name,
        content_type=body.content_type,
        document_type=body.document_type,
        file_size_bytes=body.file_size_bytes,
    )


@router.post(
    "/verification/{request_id}/documents",
    response_model=VerificationDocument,
    status_code=status.HTTP_201_CREATED,
)
def add_document(
    request_id: RequestIdPath,
    body: DocumentCreate,
    verification: VerificationServiceDep,
    viewer: ViewerDep,
):
    return verification.add_document(request_id, viewer, body)


@router.delete("/verification/{request_id}/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    request_id: RequestIdPath,
    document_id: Annotated[UUID, Path(description="Document UUID")],
    verification: VerificationServiceDep,
    viewer: ViewerDep,
):
    verification.delete_document(request_id, document_id, viewer)

# =============================================================================
# app/routers/admin.py - Admin Endpoints
# =============================================================================
# Moderation of businesses, the verification review queue and platform stats.
# Every endpoint requires the admin role.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, Field

from app.auth import require_role
from app.dependencies import (
    BusinessServiceDep,
    SearchServiceDep,
    VerificationServiceDep,
    ViewerDep,
)
from core.models.business import Business, BusinessStats, BusinessStatus, UserRole, VerificationStatus
from core.models.search import Page, SearchFilters, SearchPage
from core.models.verification import ReviewDecision, VerificationRequest, VerificationRequestDetail

router = APIRouter(dependencies=[Depends(require_role(UserRole.ADMIN))])

BusinessIdPath = Annotated[UUID, Path(description="Business UUID")]
RequestIdPath = Annotated[UUID, Path(description="Verification request UUID")]


class RejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000, description="Shown to the supplier")


class StatusChangeRequest(BaseModel):
    status: BusinessStatus
    reason: str | None = Field(default=None, max_length=1000)


# =============================================================================
# Businesses
# =============================================================================

@router.get("/stats", response_model=BusinessStats)
def get_stats(businesses: BusinessServiceDep, viewer: ViewerDep):
    """Businesses by status and verification status, plus rating and favorite totals."""
    return businesses.stats(viewer)


@router.get("/businesses", response_model=SearchPage)
def list_businesses(
    search: SearchServiceDep,
    viewer: ViewerDep,
    status: Annotated[BusinessStatus | None, Query()] = None,
    verification_status: Annotated[VerificationStatus | None, Query()] = None,
    query: Annotated[str | None, Query()] = None,
    city: Annotated[str | None, Query()] = None,
    category: Annotated[str | None, Query()] = None,
    page: Annotated[int | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
):
    """Every business regardless of status, newest first. Use `status=pending` for the approval queue."""
    filters = SearchFilters(
        query=query,
        city=city,
        category=category,
        include_all_statuses=True,
        status=status,
        verification_status=verification_status,
        page=page,
        limit=limit,
    )
    return search.search(filters, viewer)


@router.post("/businesses/{business_id}/approve", response_model=Business)
def approve_business(business_id: BusinessIdPath, businesses: BusinessServiceDep, viewer: ViewerDep):
    """pending -> active."""
    return businesses.approve(business_id, viewer)


@router.post("/businesses/{business_id}/reject", response_model=Business)
def reject_business(
    business_id: BusinessIdPath,
    body: RejectRequest,
    businesses: BusinessServiceDep,
    viewer: ViewerDep,
):
    """pending -> draft, with the reason kept for the supplier."""
    return businesses.reject(business_id, viewer, body.reason)


@router.post("/businesses/{business_id}/suspend", response_model=Business)
def suspend_business(business_id: BusinessIdPath, businesses: BusinessServiceDep, viewer: ViewerDep):
    return businesses.suspend(business_id, viewer)


@router.post("/businesses/{business_id}/reactivate", response_model=Business)
def reactivate_business(business_id: BusinessIdPath, businesses: BusinessServiceDep, viewer: ViewerDep):
    return businesses.reactivate(business_id, viewer)


@router.patch("/businesses/{business_id}/status", response_model=Business)
def change_status(
    business_id: BusinessIdPath,
    body: StatusChangeRequest,
    businesses: BusinessServiceDep,
    viewer: ViewerDep,
):
    """Move a business to `status` through whichever transition allows it."""
    return businesses.set_status(business_id, viewer, body.status, body.reason)


# =============================================================================
# Verification
# =============================================================================

@router.get("/verification-requests", response_model=Page[VerificationRequest])
def list_verification_requests(
    verification: VerificationServiceDep,
    viewer: ViewerDep,
    status: Annotated[VerificationStatus | None, Query(description="Defaults to pending")] = VerificationStatus.PENDING,
    page: Annotated[int | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
):
    return verification.list_requests(viewer, status=status, page=page, limit=limit)


@router.get("/verification-requests/{request_id}", response_model=VerificationRequestDetail)
def get_verification_request(
    request_id: RequestIdPath,
    verification: VerificationServiceDep,
    viewer: ViewerDep,
):
    """A request with its business and documents."""
    return verification.get_request(request_id, viewer)


@router.post("/verification-requests/{request_id}/review", response_model=VerificationRequest)
def review_verification_request(
    request_id: RequestIdPath,
    body: ReviewDecision,
    verification: VerificationServiceDep,
    viewer: ViewerDep,
):
    """
    Approve or reject a pending request.

    The request and the business verification status change together;
    on failure neither changes.
    """
    return verification.review(request_id, viewer, body)
